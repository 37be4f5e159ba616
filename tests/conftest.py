"""
Fixtures pytest partagees pour les tests mediacrawl.

Ce module contient les fixtures communes utilisees dans les tests:
- Mocks des ports (IContentSource, IMetadataProvider, ITitleRepository)
- Fonction d'attente enregistreuse (backoff et pacing sans attente reelle)
- Settings de test avec chemins temporaires
- Titres types (film et serie)
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config import Settings
from src.core.entities.catalog import (
    Episode,
    File,
    Link,
    MovieTitle,
    Season,
    SeriesTitle,
    Source,
)
from src.core.ports.api_clients import IMetadataProvider
from src.core.ports.content_source import IContentSource
from src.core.ports.repositories import ITitleRepository


class RecordingSleep:
    """Remplace asyncio.sleep : enregistre les attentes sans attendre."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def mock_content_source() -> AsyncMock:
    """
    Mock de IContentSource.

    Les valeurs de retour doivent etre configurees dans chaque test.
    """
    return AsyncMock(spec=IContentSource)


@pytest.fixture
def mock_metadata_provider() -> AsyncMock:
    """Mock de IMetadataProvider : aucun resultat par defaut."""
    provider = AsyncMock(spec=IMetadataProvider)
    provider.search.return_value = []
    provider.get_details.return_value = None
    provider.get_season_details.return_value = None
    return provider


@pytest.fixture
def mock_title_repository() -> MagicMock:
    """Mock de ITitleRepository (methodes synchrones)."""
    repo = MagicMock(spec=ITitleRepository)
    repo.insert_if_absent.return_value = True
    repo.update_by_key.return_value = True
    repo.find.return_value = []
    return repo


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler checkpoints, catalogue,
    cache, base et logs de chaque test.
    """
    return Settings(
        temp_dir=tmp_path / "tmp",
        catalog_dir=tmp_path / "catalog",
        cache_dir=tmp_path / "cache",
        database_url=f"sqlite:///{tmp_path}/test.db",
        log_file=tmp_path / "test.log",
        failure_log_file=tmp_path / "failures.log",
        request_interval=0,
        retry_delay=0,
    )


@pytest.fixture
def movie_title() -> MovieTitle:
    """Film type avec deux fichiers."""
    return MovieTitle(
        local_id="alpha-1234",
        title="Alpha",
        description="Un film de test",
        files=[
            File(
                file_id=11,
                file_name="Alpha.2020.1080p.x264.mkv",
                size="1.5 GB",
                size_mb=1536,
                links=[Link(quality="1080p", url="https://cdn/alpha-1080", size="1.5 GB")],
            ),
            File(file_id=12, file_name="Alpha.2020.720p.x265.mkv", size="700 MB", size_mb=700),
        ],
        size=2236,
    )


@pytest.fixture
def series_title() -> SeriesTitle:
    """Serie type : saison 1 (E01, E02), sans metadonnees TMDB."""
    e1_file = File(file_id=101, file_name="Dark.S01E01.1080p.x264.mkv", size_mb=500)
    e2_file = File(file_id=102, file_name="Dark.S01E02.1080p.x264.mkv", size_mb=400)
    return SeriesTitle(
        local_id="dark-42",
        title="Dark",
        description="",
        seasons=[
            Season(
                season_id="s1",
                season_number=1,
                name="Season 1",
                size=900,
                episodes=[
                    Episode(
                        episode_id="e1",
                        episode_number=1,
                        name="Episode 1",
                        size=500,
                        sources=[Source("src", "H.264/x264", [e1_file])],
                    ),
                    Episode(
                        episode_id="e2",
                        episode_number=2,
                        name="Episode 2",
                        size=400,
                        sources=[Source("src", "H.264/x264", [e2_file])],
                    ),
                ],
            )
        ],
        size=900,
    )
