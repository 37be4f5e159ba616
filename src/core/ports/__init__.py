"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Ports repository : Contrats de persistance des données
- ITitleRepository : Collection de documents Title indexée par ID local

Ports client API : Contrats pour les services externes
- IMetadataProvider : Fournisseur de métadonnées canonique (TMDB)
- MetadataSearchResult, MetadataDetails, SeasonDetails : structures renvoyées

Port source de contenu :
- IContentSource : Site d'index et hébergeur de fichiers
"""

from src.core.ports.api_clients import (
    EpisodeDetails,
    IMetadataProvider,
    MetadataDetails,
    MetadataSearchResult,
    SeasonDetails,
    SeasonSummary,
)
from src.core.ports.content_source import IContentSource
from src.core.ports.repositories import ITitleRepository

__all__ = [
    # Repositories
    "ITitleRepository",
    # Clients API
    "IMetadataProvider",
    "MetadataSearchResult",
    "MetadataDetails",
    "SeasonDetails",
    "SeasonSummary",
    "EpisodeDetails",
    # Source de contenu
    "IContentSource",
]
