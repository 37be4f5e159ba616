"""
Client TMDB pour la recherche et recuperation de metadonnees.

Implemente l'interface IMetadataProvider pour TMDB (The Movie Database),
films et series. Utilise le cache persistant et le mecanisme de retry pour
gerer le rate limiting.

Usage:
    cache = APICache()
    client = TMDBClient(api_key="your_key", cache=cache)
    results = await client.search("Alpha", TitleKind.MOVIE)
    details = await client.get_details(results[0].id, TitleKind.MOVIE)
    await client.close()
"""

from typing import Any, Optional

import httpx
from loguru import logger

from src.adapters.api.cache import APICache, cache_key
from src.adapters.api.retry import request_with_retry
from src.core.entities.catalog import (
    CastMember,
    CrewMember,
    Genre,
    Network,
    TitleKind,
    Video,
)
from src.core.errors import FatalError
from src.core.ports.api_clients import (
    EpisodeDetails,
    IMetadataProvider,
    MetadataDetails,
    MetadataSearchResult,
    SeasonDetails,
    SeasonSummary,
)


class TMDBClient(IMetadataProvider):
    """
    Client API TMDB pour les metadonnees de films et series.

    Implemente IMetadataProvider avec:
    - Recherche par titre (/search/movie, /search/tv)
    - Details complets avec credits et videos (append_to_response)
    - Details de saison (/tv/{id}/season/{n})
    - Cache persistant (24h recherches, 7j details)
    - Retry automatique sur rate limiting (429) et erreurs serveur

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"

    def __init__(
        self,
        api_key: str,
        cache: APICache,
        language: str = "en-US",
        timeout: float = 30.0,
        max_attempts: int = 5,
    ) -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API TMDB (v3) ou Read Access Token (v4)
            cache: Instance APICache pour le caching des resultats
            language: Langue des metadonnees (ex: "fr-FR")
            timeout: Timeout absolu de chaque requete en secondes
            max_attempts: Tentatives maximum sur 429 / 5xx
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer
        """
        if self._client is None or self._client.is_closed:
            is_v4_token = len(self._api_key) > 40

            headers = {"Accept": "application/json"}
            params = {}

            if is_v4_token:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=self._timeout,
            )
        return self._client

    @property
    def source(self) -> str:
        return "tmdb"

    async def _get_json(self, path: str, params: dict[str, Any]) -> Optional[dict]:
        """GET avec retry ; retourne None sur 404."""
        client = self._get_client()
        try:
            response = await request_with_retry(
                client, "GET", path, max_attempts=self._max_attempts, params=params
            )
        except FatalError as e:
            if e.status_code == 404:
                logger.debug(f"TMDB 404 pour {path}")
                return None
            raise
        return response.json()

    async def search(self, query: str, kind: TitleKind) -> list[MetadataSearchResult]:
        """
        Recherche des films ou series par titre.

        Utilise le pattern cache-first: verifie le cache AVANT de faire
        un appel API. Les resultats sont caches pour 24 heures.

        Returns:
            Liste de MetadataSearchResult dans l'ordre TMDB (vide si aucun)
        """
        key = cache_key("tmdb", "search", kind.value, query, self._language)

        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        data = await self._get_json(
            f"/search/{kind.value}",
            {"query": query, "language": self._language, "include_adult": "false"},
        )

        results = []
        for item in (data or {}).get("results", []):
            if kind is TitleKind.MOVIE:
                title = item.get("title") or item.get("original_title", "")
                date = item.get("release_date")
            else:
                title = item.get("name") or item.get("original_name", "")
                date = item.get("first_air_date")
            results.append(
                MetadataSearchResult(
                    id=int(item["id"]),
                    title=title,
                    release_date=date or None,
                    popularity=float(item.get("popularity") or 0.0),
                )
            )

        logger.debug(f"TMDB search '{query}' ({kind.value}): {len(results)} resultat(s)")
        await self._cache.set_search(key, results)
        return results

    async def get_details(self, media_id: int, kind: TitleKind) -> Optional[MetadataDetails]:
        """
        Recupere les details complets d'un film ou d'une serie.

        Inclut credits et videos via append_to_response. Les details sont
        caches pour 7 jours.

        Returns:
            MetadataDetails, ou None si l'ID est inconnu de TMDB
        """
        key = cache_key("tmdb", "details", kind.value, media_id, self._language)

        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        data = await self._get_json(
            f"/{kind.value}/{media_id}",
            {"language": self._language, "append_to_response": "credits,videos"},
        )
        if data is None:
            return None

        details = _parse_details(data, kind)
        await self._cache.set_details(key, details)
        return details

    async def get_season_details(
        self, media_id: int, season_number: int
    ) -> Optional[SeasonDetails]:
        """Recupere une saison et ses episodes (cache 7 jours)."""
        key = cache_key("tmdb", "season", media_id, season_number, self._language)

        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        data = await self._get_json(
            f"/tv/{media_id}/season/{season_number}",
            {"language": self._language},
        )
        if data is None:
            return None

        season = SeasonDetails(
            id=int(data.get("id") or 0),
            season_number=int(data.get("season_number", season_number)),
            name=data.get("name") or "",
            air_date=data.get("air_date") or None,
            episodes=[
                EpisodeDetails(
                    id=int(ep.get("id") or 0),
                    episode_number=int(ep.get("episode_number") or 0),
                    name=ep.get("name") or "",
                    air_date=ep.get("air_date") or None,
                    still_path=ep.get("still_path"),
                    overview=ep.get("overview"),
                    vote_average=ep.get("vote_average"),
                    vote_count=ep.get("vote_count"),
                )
                for ep in data.get("episodes", [])
            ],
        )
        await self._cache.set_details(key, season)
        return season

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


def _parse_details(data: dict, kind: TitleKind) -> MetadataDetails:
    """Convertit la reponse JSON TMDB en MetadataDetails."""
    credits_data = data.get("credits") or {}
    videos_data = data.get("videos") or {}

    details = MetadataDetails(
        id=int(data["id"]),
        overview=data.get("overview"),
        poster_path=data.get("poster_path"),
        backdrop_path=data.get("backdrop_path"),
        vote_average=data.get("vote_average"),
        vote_count=data.get("vote_count"),
        popularity=data.get("popularity"),
        genres=[Genre(id=g.get("id", 0), name=g.get("name", "")) for g in data.get("genres", [])],
        cast=[
            CastMember(
                id=c.get("id", 0),
                name=c.get("name", ""),
                character=c.get("character") or "",
                profile_path=c.get("profile_path"),
            )
            for c in credits_data.get("cast", [])
        ],
        crew=[
            CrewMember(
                id=c.get("id", 0),
                name=c.get("name", ""),
                department=c.get("department") or "",
                job=c.get("job") or "",
                profile_path=c.get("profile_path"),
            )
            for c in credits_data.get("crew", [])
        ],
        videos=[
            Video(
                id=v.get("id", ""),
                key=v.get("key", ""),
                name=v.get("name", ""),
                site=v.get("site", ""),
                type=v.get("type", ""),
                official=bool(v.get("official", False)),
            )
            for v in videos_data.get("results", [])
        ],
    )

    if kind is TitleKind.MOVIE:
        details.title = data.get("title") or data.get("original_title", "")
        details.release_date = data.get("release_date") or None
        details.runtime = data.get("runtime")
        details.imdb_id = data.get("imdb_id")
        return details

    details.title = data.get("name") or data.get("original_name", "")
    details.release_date = data.get("first_air_date") or None
    details.last_air_date = data.get("last_air_date") or None
    details.status = data.get("status")
    details.number_of_seasons = data.get("number_of_seasons")
    details.number_of_episodes = data.get("number_of_episodes")
    details.networks = [
        Network(
            id=n.get("id", 0),
            name=n.get("name", ""),
            logo_path=n.get("logo_path"),
            origin_country=n.get("origin_country"),
        )
        for n in data.get("networks", [])
    ]
    details.seasons = [
        SeasonSummary(
            id=int(s.get("id") or 0),
            season_number=int(s.get("season_number") or 0),
            name=s.get("name") or "",
            air_date=s.get("air_date") or None,
            poster_path=s.get("poster_path"),
        )
        for s in data.get("seasons", [])
    ]
    return details
