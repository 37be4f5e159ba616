"""
Tests unitaires pour APICache.

Ces tests verifient:
- Stockage et recuperation de valeurs
- TTL differencies pour recherche (24h) et details (7j)
- Nettoyage du cache
- Cles normalisees
"""

import asyncio
from pathlib import Path

import pytest

from src.adapters.api.cache import APICache, cache_key
from src.core.ports.api_clients import MetadataSearchResult


class TestCacheKey:
    """Tests pour cache_key()."""

    def test_parts_normalized(self) -> None:
        assert cache_key("tmdb", "search", "tv", " Dark ", "fr-FR") == "tmdb:search:tv:dark:fr-fr"

    def test_non_string_parts(self) -> None:
        assert cache_key("tmdb", "season", 70523, 1) == "tmdb:season:70523:1"


class TestAPICache:
    """Tests pour la classe APICache."""

    @pytest.fixture
    def cache(self, tmp_path: Path) -> APICache:
        """Cree un cache avec un repertoire temporaire."""
        cache = APICache(cache_dir=str(tmp_path / "test_cache"))
        yield cache
        cache.close()

    @pytest.mark.asyncio
    async def test_get_returns_none_for_missing_key(self, cache: APICache) -> None:
        """get() retourne None pour une cle inexistante."""
        assert await cache.get("nonexistent_key") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache: APICache) -> None:
        """set() puis get() retourne la valeur stockee."""
        value = {"title": "Alpha", "year": 2020}

        await cache.set("test_key", value, ttl=3600)

        assert await cache.get("test_key") == value

    def test_search_ttl_uses_24_hours(self) -> None:
        """SEARCH_TTL est defini a 24 heures (86400 secondes)."""
        assert APICache.SEARCH_TTL == 86400

    def test_details_ttl_uses_7_days(self) -> None:
        """DETAILS_TTL est defini a 7 jours (604800 secondes)."""
        assert APICache.DETAILS_TTL == 604800

    @pytest.mark.asyncio
    async def test_set_search_stores_dataclasses(self, cache: APICache) -> None:
        """Les resultats de recherche (dataclasses) sont conserves tels quels."""
        key = cache_key("tmdb", "search", "movie", "alpha")
        value = [MetadataSearchResult(id=1, title="Alpha", release_date="2020-01-01")]

        await cache.set_search(key, value)

        assert await cache.get(key) == value

    @pytest.mark.asyncio
    async def test_clear_removes_all_entries(self, cache: APICache) -> None:
        """clear() supprime toutes les entrees du cache."""
        await cache.set("key1", "value1", ttl=3600)
        await cache.set("key2", "value2", ttl=3600)

        await cache.clear()

        assert await cache.get("key1") is None
        assert await cache.get("key2") is None

    @pytest.mark.asyncio
    async def test_async_operations_dont_block(self, cache: APICache) -> None:
        """Plusieurs operations peuvent etre lancees en parallele."""
        keys = [f"key_{i}" for i in range(10)]
        values = [f"value_{i}" for i in range(10)]

        await asyncio.gather(*[cache.set(k, v, ttl=3600) for k, v in zip(keys, values)])
        results = await asyncio.gather(*[cache.get(k) for k in keys])

        assert results == values
