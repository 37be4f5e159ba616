"""
Tests unitaires pour configure_logging.

Ces tests verifient:
- Creation des repertoires de log
- Journal des echecs limite aux unites abandonnees (contexte bind)
"""

import sys
from pathlib import Path

import pytest
from loguru import logger

from src.core.errors import FatalError
from src.logging_config import configure_logging
from src.services.worker_pool import WorkerPool


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestConfigureLogging:
    def test_log_directories_created(self, tmp_path: Path) -> None:
        configure_logging(
            log_file=tmp_path / "logs" / "app.log",
            failure_file=tmp_path / "failures" / "failures.log",
        )

        assert (tmp_path / "logs").is_dir()
        assert (tmp_path / "failures").is_dir()

    def test_failure_file_keeps_only_unit_failures(self, tmp_path: Path) -> None:
        failure_file = tmp_path / "failures.log"
        configure_logging(log_file=tmp_path / "app.log", failure_file=failure_file)

        logger.warning("Checkpoint movie impossible")
        logger.bind(unit="m7", attempts=3, error_kind="transient").error("timeout")
        logger.remove()

        lines = failure_file.read_text().splitlines()
        assert len(lines) == 1
        assert "unite=m7" in lines[0]
        assert "tentatives=3" in lines[0]
        assert "transient" in lines[0]
        assert lines[0].endswith("timeout")

    def test_no_failure_file_by_default(self, tmp_path: Path) -> None:
        configure_logging(log_file=tmp_path / "app.log")

        logger.bind(unit="m1", attempts=1, error_kind="fatal").error("gone")
        logger.remove()

        assert [p.name for p in tmp_path.iterdir()] == ["app.log"]

    @pytest.mark.asyncio
    async def test_abandoned_pool_unit_reaches_failure_file(
        self, tmp_path: Path, recording_sleep
    ) -> None:
        failure_file = tmp_path / "failures.log"
        configure_logging(log_file=tmp_path / "app.log", failure_file=failure_file)
        pool = WorkerPool(max_concurrency=1, request_interval=0, sleep=recording_sleep)

        async def task(unit: str) -> None:
            if unit == "p2":
                raise FatalError("Not found", status_code=404)

        await pool.run(["p1", "p2"], task)
        logger.remove()

        lines = failure_file.read_text().splitlines()
        assert len(lines) == 1
        assert "unite=p2" in lines[0]
        assert "tentatives=1" in lines[0]
        assert "fatal" in lines[0]
