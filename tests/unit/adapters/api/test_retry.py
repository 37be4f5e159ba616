"""
Tests unitaires pour la classification des reponses et le retry HTTP.

Ces tests verifient:
- check_response : 200 ok, 429 RATE_LIMITED, 5xx TRANSIENT, autres FATAL
- send : erreurs de transport converties en TransientError
- with_retry relance les erreurs relancables, pas les fatales
- request_with_retry detecte les 429 et relance automatiquement
"""

import httpx
import pytest
import respx

from src.adapters.api.retry import check_response, request_with_retry, send, with_retry
from src.core.errors import (
    ErrorKind,
    FatalError,
    RateLimitError,
    TransientError,
    classify,
)

URL = "https://api.example.com/data"


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", URL), **kwargs)


class TestRateLimitError:
    """Tests pour l'exception RateLimitError."""

    def test_rate_limit_error_stores_retry_after(self) -> None:
        """RateLimitError stocke la valeur Retry-After."""
        error = RateLimitError(retry_after=60)
        assert error.retry_after == 60
        assert "60" in str(error)
        assert error.kind is ErrorKind.RATE_LIMITED

    def test_rate_limit_error_without_retry_after(self) -> None:
        """RateLimitError fonctionne sans Retry-After."""
        error = RateLimitError(retry_after=None)
        assert error.retry_after is None


class TestCheckResponse:
    """Tests pour check_response()."""

    def test_200_passes(self) -> None:
        response = _response(200, json={})
        assert check_response(response) is response

    def test_429_is_rate_limited(self) -> None:
        with pytest.raises(RateLimitError) as exc_info:
            check_response(_response(429, headers={"Retry-After": "30"}))
        assert exc_info.value.retry_after == 30

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_5xx_is_transient(self, status: int) -> None:
        with pytest.raises(TransientError) as exc_info:
            check_response(_response(status))
        assert exc_info.value.status_code == status
        assert classify(exc_info.value) is ErrorKind.TRANSIENT

    @pytest.mark.parametrize("status", [301, 403, 404])
    def test_other_statuses_are_fatal(self, status: int) -> None:
        with pytest.raises(FatalError) as exc_info:
            check_response(_response(status))
        assert exc_info.value.kind is ErrorKind.FATAL


class TestSend:
    """Tests pour send()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_is_transient(self, respx_mock: respx.Router) -> None:
        respx_mock.get(URL).mock(side_effect=httpx.ConnectTimeout("timed out"))

        async with httpx.AsyncClient() as client:
            with pytest.raises(TransientError):
                await send(client, "GET", URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_returns_response(self, respx_mock: respx.Router) -> None:
        respx_mock.get(URL).mock(return_value=httpx.Response(200, text="ok"))

        async with httpx.AsyncClient() as client:
            response = await send(client, "GET", URL)

        assert response.text == "ok"


class TestWithRetryDecorator:
    """Tests pour le decorateur with_retry."""

    @pytest.mark.asyncio
    async def test_with_retry_retries_on_rate_limit_error(self) -> None:
        """with_retry relance quand RateLimitError est levee."""
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def flaky_function() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise RateLimitError(retry_after=1)
            return "success"

        result = await flaky_function()
        assert result == "success"
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_with_retry_does_not_retry_fatal(self) -> None:
        """with_retry ne relance pas les erreurs fatales."""
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def not_found() -> str:
            nonlocal call_count
            call_count += 1
            raise FatalError("Not found", status_code=404)

        with pytest.raises(FatalError):
            await not_found()
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_with_retry_does_not_retry_other_exceptions(self) -> None:
        """with_retry ne relance pas les autres exceptions."""
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def raises_value_error() -> str:
            nonlocal call_count
            call_count += 1
            raise ValueError("not a fetch error")

        with pytest.raises(ValueError):
            await raises_value_error()
        assert call_count == 1  # Pas de retry


class TestRequestWithRetry:
    """Tests pour request_with_retry avec httpx."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_request_with_retry_raises_on_429(self, respx_mock: respx.Router) -> None:
        """request_with_retry convertit 429 en RateLimitError et relance."""
        route = respx_mock.get(URL).mock(
            return_value=httpx.Response(429, headers={"Retry-After": "30"})
        )

        async with httpx.AsyncClient() as client:
            with pytest.raises(RateLimitError) as exc_info:
                await request_with_retry(client, "GET", URL, max_attempts=2)

        assert exc_info.value.retry_after == 30
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_request_with_retry_retries_5xx_then_succeeds(self, respx_mock: respx.Router) -> None:
        """request_with_retry reussit apres une erreur serveur."""
        route = respx_mock.get(URL).mock(
            side_effect=[
                httpx.Response(503),
                httpx.Response(200, json={"status": "ok"}),
            ]
        )

        async with httpx.AsyncClient() as client:
            response = await request_with_retry(client, "GET", URL, max_attempts=3)

        assert response.json() == {"status": "ok"}
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_request_with_retry_fatal_not_retried(self, respx_mock: respx.Router) -> None:
        """request_with_retry leve FatalError sans relancer sur 404."""
        route = respx_mock.get(URL).mock(return_value=httpx.Response(404))

        async with httpx.AsyncClient() as client:
            with pytest.raises(FatalError) as exc_info:
                await request_with_retry(client, "GET", URL)

        assert exc_info.value.status_code == 404
        assert route.call_count == 1
