"""
Interface port pour la source de contenu (site d'index + hebergeur de fichiers).

Le coeur ne depend que de ce sous-ensemble etroit : listing des pages
d'index, resolution du lien de partage d'un titre, listing des noeuds d'un
partage, listing d'un dossier, details d'un fichier et liens par qualite.
"""

from abc import ABC, abstractmethod

from src.core.entities.catalog import AnyTitle, File, Link, TitleKind
from src.core.value_objects import RawFile


class IContentSource(ABC):
    """
    Contrat de la source de contenu.

    Toutes les methodes levent des FetchError classees selon le statut HTTP
    (429 -> RATE_LIMITED, 5xx/reseau -> TRANSIENT, autres -> FATAL).
    """

    @abstractmethod
    async def fetch_index_page(self, kind: TitleKind, page: int) -> list[AnyTitle]:
        """Titres (ID local, nom, description) listes sur une page d'index."""
        ...

    @abstractmethod
    async def resolve_share_link(self, local_id: str, kind: TitleKind) -> str:
        """Lien de partage de l'hebergeur pour un titre."""
        ...

    @abstractmethod
    async def list_share_nodes(self, share_link: str) -> list[RawFile]:
        """Noeuds (fichiers ou dossiers de saison) d'une page de partage."""
        ...

    @abstractmethod
    async def list_folder_files(self, share_key: str, parent_id: int) -> list[RawFile]:
        """Fichiers d'un dossier de partage (une saison de serie)."""
        ...

    @abstractmethod
    async def get_file_info(self, file_id: int) -> File:
        """Details d'un fichier (nom, taille, vignette), sans liens."""
        ...

    @abstractmethod
    async def get_qualities(self, file_id: int) -> list[Link]:
        """Liens de streaming disponibles par qualite pour un fichier."""
        ...
