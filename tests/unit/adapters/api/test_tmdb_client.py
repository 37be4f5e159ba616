"""
Tests unitaires pour TMDBClient.

Utilise respx pour mocker les requetes HTTP httpx.
"""

from unittest.mock import AsyncMock

import httpx
import pytest
import respx

from src.adapters.api.cache import APICache
from src.adapters.api.tmdb_client import TMDBClient
from src.core.entities.catalog import TitleKind
from src.core.ports.api_clients import MetadataSearchResult
from tests.fixtures.tmdb_responses import (
    TMDB_MOVIE_DETAILS_RESPONSE,
    TMDB_SEARCH_EMPTY_RESPONSE,
    TMDB_SEARCH_MOVIE_RESPONSE,
    TMDB_SEARCH_TV_RESPONSE,
    TMDB_SEASON_DETAILS_RESPONSE,
    TMDB_TV_DETAILS_RESPONSE,
)

BASE = "https://api.themoviedb.org/3"


@pytest.fixture
def mock_cache() -> AsyncMock:
    """Cache mocke qui ne contient rien."""
    cache = AsyncMock(spec=APICache)
    cache.get.return_value = None
    return cache


@pytest.fixture
def client(mock_cache) -> TMDBClient:
    """Client TMDB avec cache mocke."""
    return TMDBClient(api_key="test_api_key", cache=mock_cache, max_attempts=2)


class TestTMDBClientSearch:
    """Tests pour search()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_movie_returns_results(self, client, mock_cache) -> None:
        """search() parse les resultats films dans l'ordre TMDB."""
        route = respx.get(f"{BASE}/search/movie").mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_MOVIE_RESPONSE)
        )

        results = await client.search("Alpha 2018", TitleKind.MOVIE)

        assert [r.id for r in results] == [487242, 550]
        assert results[0].title == "Alpha"
        assert results[0].year == 2018
        assert results[0].popularity == 31.4
        request = route.calls.last.request
        assert request.url.params["query"] == "Alpha 2018"
        assert request.url.params["api_key"] == "test_api_key"
        mock_cache.set_search.assert_awaited_once()

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_tv_uses_name_and_first_air_date(self, client) -> None:
        respx.get(f"{BASE}/search/tv").mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_TV_RESPONSE)
        )

        results = await client.search("Dark", TitleKind.SERIES)

        assert len(results) == 1
        assert results[0].title == "Dark"
        assert results[0].release_date == "2017-12-01"

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_empty(self, client) -> None:
        respx.get(f"{BASE}/search/movie").mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE)
        )

        assert await client.search("zzzz", TitleKind.MOVIE) == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_uses_cache_first(self, client, mock_cache) -> None:
        """Une valeur en cache est retournee sans appel HTTP."""
        cached = [MetadataSearchResult(id=1, title="Cached")]
        mock_cache.get.return_value = cached
        route = respx.get(f"{BASE}/search/movie")

        results = await client.search("Alpha", TitleKind.MOVIE)

        assert results == cached
        assert route.call_count == 0

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_retries_on_rate_limit(self, client) -> None:
        """Un 429 suivi d'un 200 est relance de facon transparente."""
        route = respx.get(f"{BASE}/search/movie").mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "1"}),
                httpx.Response(200, json=TMDB_SEARCH_MOVIE_RESPONSE),
            ]
        )

        results = await client.search("Alpha", TitleKind.MOVIE)

        assert len(results) == 2
        assert route.call_count == 2


class TestTMDBClientDetails:
    """Tests pour get_details() et get_season_details()."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_movie_details(self, client, mock_cache) -> None:
        route = respx.get(f"{BASE}/movie/487242").mock(
            return_value=httpx.Response(200, json=TMDB_MOVIE_DETAILS_RESPONSE)
        )

        details = await client.get_details(487242, TitleKind.MOVIE)

        assert details is not None
        assert details.title == "Alpha"
        assert details.runtime == 96
        assert details.imdb_id == "tt4244998"
        assert [g.name for g in details.genres] == ["Adventure", "Drama"]
        # Donnees brutes : le filtrage est fait par la reconciliation
        assert len(details.cast) == 12
        assert len(details.crew) == 3
        assert len(details.videos) == 3
        assert route.calls.last.request.url.params["append_to_response"] == "credits,videos"
        mock_cache.set_details.assert_awaited_once()

    @pytest.mark.asyncio
    @respx.mock
    async def test_tv_details(self, client) -> None:
        respx.get(f"{BASE}/tv/70523").mock(
            return_value=httpx.Response(200, json=TMDB_TV_DETAILS_RESPONSE)
        )

        details = await client.get_details(70523, TitleKind.SERIES)

        assert details.title == "Dark"
        assert details.release_date == "2017-12-01"
        assert [s.season_number for s in details.seasons] == [0, 1, 2]
        assert details.networks[0].name == "Netflix"
        assert details.runtime is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_details_not_found_returns_none(self, client) -> None:
        respx.get(f"{BASE}/movie/999999").mock(
            return_value=httpx.Response(404, json={"status_code": 34})
        )

        assert await client.get_details(999999, TitleKind.MOVIE) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_season_details(self, client) -> None:
        respx.get(f"{BASE}/tv/70523/season/1").mock(
            return_value=httpx.Response(200, json=TMDB_SEASON_DETAILS_RESPONSE)
        )

        season = await client.get_season_details(70523, 1)

        assert season.id == 901
        assert season.season_number == 1
        assert [e.id for e in season.episodes] == [1001, 1002, 1003]
        assert season.episodes[1].name == "Lies"


class TestTMDBClientAuth:
    """Tests du mode d'authentification."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_v4_token_sent_as_bearer(self, mock_cache) -> None:
        token = "x" * 64
        tmdb = TMDBClient(api_key=token, cache=mock_cache)
        route = respx.get(f"{BASE}/search/movie").mock(
            return_value=httpx.Response(200, json=TMDB_SEARCH_EMPTY_RESPONSE)
        )

        await tmdb.search("Alpha", TitleKind.MOVIE)
        await tmdb.close()

        request = route.calls.last.request
        assert request.headers["Authorization"] == f"Bearer {token}"
        assert "api_key" not in request.url.params

    def test_source(self, mock_cache) -> None:
        assert TMDBClient(api_key="k", cache=mock_cache).source == "tmdb"
