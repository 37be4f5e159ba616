"""Tests pour la taxonomie des erreurs de collecte."""

import pytest

from src.core.errors import (
    ErrorKind,
    FatalError,
    FetchError,
    RateLimitError,
    SchemaError,
    TransientError,
    classify,
)


class TestErrorKind:
    @pytest.mark.parametrize(
        "kind, retryable",
        [
            (ErrorKind.RATE_LIMITED, True),
            (ErrorKind.TRANSIENT, True),
            (ErrorKind.FATAL, False),
            (ErrorKind.PARTIAL_FAILURE, False),
        ],
    )
    def test_retryable(self, kind: ErrorKind, retryable: bool) -> None:
        assert kind.retryable is retryable


class TestClassify:
    """classify() se base uniquement sur le kind porte par l'exception."""

    def test_fetch_errors_carry_their_kind(self) -> None:
        assert classify(RateLimitError(5)) is ErrorKind.RATE_LIMITED
        assert classify(TransientError("timeout")) is ErrorKind.TRANSIENT
        assert classify(FatalError("404", status_code=404)) is ErrorKind.FATAL

    def test_schema_error_is_fatal(self) -> None:
        error = SchemaError("missing field")
        assert isinstance(error, FatalError)
        assert classify(error) is ErrorKind.FATAL

    def test_unknown_exceptions_are_fatal(self) -> None:
        assert classify(KeyError("fid")) is ErrorKind.FATAL
        assert classify(ValueError("bad")) is ErrorKind.FATAL

    def test_status_code_kept(self) -> None:
        error = TransientError("Server error", status_code=502)
        assert error.status_code == 502
        assert isinstance(error, FetchError)
        assert RateLimitError().status_code == 429
