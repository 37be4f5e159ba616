"""
Entites du catalogue.

Hierarchie construite par le crawler puis enrichie par la reconciliation :
Title (MovieTitle | SeriesTitle) -> Season -> Episode -> Source -> File -> Link.

Les films n'ont pas de saisons : leurs fichiers sont rattaches directement
au titre. Les tailles agregees sont exprimees en megaoctets entiers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union


class TitleKind(Enum):
    """Type de contenu, avec le code utilise par le site d'index."""

    MOVIE = "movie"
    SERIES = "tv"

    @property
    def content_type(self) -> int:
        """Code numerique du type de contenu (1 = film, 2 = serie)."""
        return 1 if self is TitleKind.MOVIE else 2


@dataclass
class Link:
    """Lien de streaming resolu pour une qualite donnee."""

    quality: str = ""
    url: str = ""
    size: str = ""


@dataclass
class File:
    """
    Fichier heberge.

    Attributes:
        file_id: Identifiant du fichier chez l'hebergeur (unique par titre)
        file_name: Nom de fichier affiche
        size: Taille telle qu'affichee par l'hebergeur ("1.4 GB")
        size_mb: Taille normalisee en megaoctets entiers
        thumb_url: Vignette
        links: Liens de streaming par qualite (vide si enrichissement echoue)
    """

    file_id: int = 0
    file_name: str = ""
    size: str = ""
    size_mb: int = 0
    thumb_url: str = ""
    links: list[Link] = field(default_factory=list)


@dataclass
class Source:
    """Groupe de fichiers partageant le meme codec pour un episode."""

    source_id: str = ""
    source_name: str = ""
    files: list[File] = field(default_factory=list)


@dataclass
class Episode:
    """Episode d'une saison, avec ses sources et les champs TMDB."""

    episode_id: str = ""
    episode_number: int = 0
    name: str = ""
    size: int = 0
    sources: list[Source] = field(default_factory=list)

    external_id: Optional[int] = None
    air_date: Optional[str] = None
    still_path: Optional[str] = None
    overview: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None


@dataclass
class Season:
    """Saison d'une serie. La taille est la somme de ses episodes."""

    season_id: str = ""
    season_number: int = 0
    name: str = ""
    size: int = 0
    episodes: list[Episode] = field(default_factory=list)

    external_id: Optional[int] = None
    air_date: Optional[str] = None
    poster_path: Optional[str] = None


@dataclass
class Genre:
    id: int = 0
    name: str = ""


@dataclass
class CastMember:
    id: int = 0
    name: str = ""
    character: str = ""
    profile_path: Optional[str] = None


@dataclass
class CrewMember:
    id: int = 0
    name: str = ""
    department: str = ""
    job: str = ""
    profile_path: Optional[str] = None


@dataclass
class Video:
    id: str = ""
    key: str = ""
    name: str = ""
    site: str = ""
    type: str = ""
    official: bool = False


@dataclass
class Network:
    id: int = 0
    name: str = ""
    logo_path: Optional[str] = None
    origin_country: Optional[str] = None


@dataclass
class Title:
    """
    Racine du catalogue, commune aux films et aux series.

    L'ID local (attribue par le site d'index) est la cle de fusion.
    L'ID externe (TMDB), une fois renseigne, fait autorite pour les
    resynchronisations.
    """

    kind: ClassVar[TitleKind]

    local_id: str = ""
    title: str = ""
    description: str = ""
    external_id: Optional[int] = None

    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    vote_average: Optional[float] = None
    vote_count: Optional[int] = None
    popularity: Optional[float] = None
    genres: list[Genre] = field(default_factory=list)
    cast: list[CastMember] = field(default_factory=list)
    crew: list[CrewMember] = field(default_factory=list)
    videos: list[Video] = field(default_factory=list)
    last_updated: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return self.title

    def children(self) -> list:
        raise NotImplementedError

    def file_names(self) -> list[str]:
        """Noms de tous les fichiers du titre, dans l'ordre de la hierarchie."""
        raise NotImplementedError


@dataclass
class MovieTitle(Title):
    """Film : les fichiers sont rattaches directement au titre."""

    kind: ClassVar[TitleKind] = TitleKind.MOVIE

    files: list[File] = field(default_factory=list)
    size: int = 0
    release_date: Optional[str] = None
    runtime: Optional[int] = None
    imdb_id: Optional[str] = None

    def children(self) -> list[File]:
        return self.files

    def file_names(self) -> list[str]:
        return [f.file_name for f in self.files if f.file_name]


@dataclass
class SeriesTitle(Title):
    """Serie TV : saisons -> episodes -> sources -> fichiers."""

    kind: ClassVar[TitleKind] = TitleKind.SERIES

    seasons: list[Season] = field(default_factory=list)
    size: int = 0
    first_air_date: Optional[str] = None
    last_air_date: Optional[str] = None
    status: Optional[str] = None
    networks: list[Network] = field(default_factory=list)
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None

    def children(self) -> list[Season]:
        return self.seasons

    def file_names(self) -> list[str]:
        return [
            f.file_name
            for season in self.seasons
            for episode in season.episodes
            for source in episode.sources
            for f in source.files
            if f.file_name
        ]


AnyTitle = Union[MovieTitle, SeriesTitle]


def title_class(kind: TitleKind) -> type[AnyTitle]:
    """Retourne la classe d'entite correspondant au type de contenu."""
    return MovieTitle if kind is TitleKind.MOVIE else SeriesTitle
