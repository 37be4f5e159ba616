"""
Entites metier du catalogue.

Exports:
- Title, MovieTitle, SeriesTitle : racines du catalogue (union taguee par kind)
- Season, Episode, Source, File, Link : hierarchie des fichiers
- Genre, CastMember, CrewMember, Video, Network : metadonnees TMDB
- TitleKind : type de contenu (film / serie)
"""

from src.core.entities.catalog import (
    AnyTitle,
    CastMember,
    CrewMember,
    Episode,
    File,
    Genre,
    Link,
    MovieTitle,
    Network,
    Season,
    SeriesTitle,
    Source,
    Title,
    TitleKind,
    Video,
    title_class,
)

__all__ = [
    "AnyTitle",
    "CastMember",
    "CrewMember",
    "Episode",
    "File",
    "Genre",
    "Link",
    "MovieTitle",
    "Network",
    "Season",
    "SeriesTitle",
    "Source",
    "Title",
    "TitleKind",
    "Video",
    "title_class",
]
