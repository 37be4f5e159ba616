"""
Interfaces ports pour le fournisseur de metadonnees.

Le fournisseur (TMDB) expose une recherche par titre classee par pertinence
et une recuperation de details. Les structures renvoyees sont brutes : le
filtrage (top cast, crew autorise, bandes-annonces) est fait par le service
de reconciliation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from src.core.entities.catalog import (
    CastMember,
    CrewMember,
    Genre,
    Network,
    TitleKind,
    Video,
)


@dataclass
class MetadataSearchResult:
    """
    Resultat de recherche depuis le fournisseur.

    Attributs :
        id : ID TMDB
        title : Titre (ou nom pour une serie)
        release_date : Date de sortie / premiere diffusion (YYYY-MM-DD)
        popularity : Indice de popularite TMDB
    """

    id: int
    title: str
    release_date: Optional[str] = None
    popularity: float = 0.0

    @property
    def year(self) -> Optional[int]:
        """Annee extraite de release_date, ou None."""
        if self.release_date and len(self.release_date) >= 4 and self.release_date[:4].isdigit():
            return int(self.release_date[:4])
        return None


@dataclass
class SeasonSummary:
    """Saison telle que listee dans les details d'une serie."""

    id: int
    season_number: int
    name: str = ""
    air_date: Optional[str] = None
    poster_path: Optional[str] = None


@dataclass
class EpisodeDetails:
    """Episode tel que liste dans les details d'une saison."""

    id: int
    episode_number: int
    name: str = ""
    air_date: Optional[str] = None
    still_path: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None


@dataclass
class SeasonDetails:
    """Details d'une saison avec ses episodes."""

    id: int
    season_number: int
    name: str = ""
    air_date: Optional[str] = None
    episodes: list[EpisodeDetails] = field(default_factory=list)


@dataclass
class MetadataDetails:
    """
    Informations detaillees d'un film ou d'une serie.

    Les champs propres aux films (runtime, imdb_id) ou aux series
    (last_air_date, status, networks, seasons...) restent a None / vides
    pour l'autre type.
    """

    id: int
    title: str = ""
    overview: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    genres: list[Genre] = field(default_factory=list)
    cast: list[CastMember] = field(default_factory=list)
    crew: list[CrewMember] = field(default_factory=list)
    videos: list[Video] = field(default_factory=list)

    runtime: Optional[int] = None
    imdb_id: Optional[str] = None

    last_air_date: Optional[str] = None
    status: Optional[str] = None
    networks: list[Network] = field(default_factory=list)
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None
    seasons: list[SeasonSummary] = field(default_factory=list)


class IMetadataProvider(ABC):
    """
    Interface du fournisseur de metadonnees canonique.

    Les implementations levent des FetchError classees (rate limit,
    transitoire, fatale) ; un ID inconnu renvoie None.
    """

    @abstractmethod
    async def search(self, query: str, kind: TitleKind) -> list[MetadataSearchResult]:
        """
        Recherche par titre.

        Retourne :
            Resultats dans l'ordre de pertinence du fournisseur
        """
        ...

    @abstractmethod
    async def get_details(self, media_id: int, kind: TitleKind) -> Optional[MetadataDetails]:
        """Details complets (credits, videos inclus), ou None si inconnu."""
        ...

    @abstractmethod
    async def get_season_details(
        self, media_id: int, season_number: int
    ) -> Optional[SeasonDetails]:
        """Details d'une saison de serie, ou None si inconnue."""
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Identifiant du fournisseur (ex: 'tmdb')."""
        ...
