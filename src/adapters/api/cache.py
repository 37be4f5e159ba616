"""
Cache persistant pour les appels TMDB avec TTL differencies.

Le cache utilise diskcache pour la persistence sur disque : une
resynchronisation relancee le lendemain ne refait pas les recherches deja
resolues.

TTL par defaut:
- Recherches (SEARCH_TTL): 24 heures
- Details (DETAILS_TTL): 7 jours (details de titre et de saison)
"""

import asyncio
from functools import partial
from typing import Any, Optional

from diskcache import Cache


def cache_key(*parts: object) -> str:
    """
    Construit une cle de cache normalisee.

    Example:
        cache_key("tmdb", "search", "tv", "Dark", "fr-FR")
        -> "tmdb:search:tv:dark:fr-fr"
    """
    return ":".join(str(part).strip().lower() for part in parts)


class APICache:
    """
    Cache asynchrone avec TTL pour les appels API.

    Les operations diskcache sont bloquantes : elles sont deportees dans
    l'executor par defaut de la boucle.

    Example:
        cache = APICache(cache_dir=".cache/mediacrawl")
        await cache.set_search(cache_key("tmdb", "search", "movie", "alpha"), results)
        data = await cache.get(cache_key("tmdb", "search", "movie", "alpha"))
    """

    SEARCH_TTL = 24 * 60 * 60  # 24 heures en secondes (86400)
    DETAILS_TTL = 7 * 24 * 60 * 60  # 7 jours en secondes (604800)

    def __init__(self, cache_dir: str = ".cache/mediacrawl") -> None:
        self._cache = Cache(cache_dir)

    async def get(self, key: str) -> Optional[Any]:
        """Valeur stockee, ou None si absente ou expiree."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def set_search(self, key: str, value: Any) -> None:
        await self.set(key, value, self.SEARCH_TTL)

    async def set_details(self, key: str, value: Any) -> None:
        await self.set(key, value, self.DETAILS_TTL)

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
