"""
Interface port pour le stockage des titres.

Collection de documents indexee par le couple (type, ID local) : films et
series ont des espaces de cles distincts. Les
implementations (SQLModel/SQLite) stockent le document JSON complet et
quelques colonnes de recherche.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.core.entities.catalog import AnyTitle, TitleKind


class ITitleRepository(ABC):
    """
    Interface de stockage des titres du catalogue.

    Definit les operations d'insertion idempotente, de lecture et de mise a
    jour par cle, et de recherche (filtre, tri, pagination, plein texte).
    """

    @abstractmethod
    def insert_if_absent(self, title: AnyTitle) -> bool:
        """Insere le titre. Retourne False (sans erreur) si la cle existe deja."""
        ...

    @abstractmethod
    def find_by_key(self, local_id: str, kind: TitleKind) -> Optional[AnyTitle]:
        """Recupere un titre par son type et son ID local."""
        ...

    @abstractmethod
    def update_by_key(self, title: AnyTitle) -> bool:
        """Remplace le document du titre. Retourne False si la cle est absente."""
        ...

    @abstractmethod
    def find(
        self,
        kind: Optional[TitleKind] = None,
        has_external_id: Optional[bool] = None,
        text: Optional[str] = None,
        sort: Optional[str] = None,
        limit: int = 100,
        skip: int = 0,
    ) -> list[AnyTitle]:
        """
        Recherche des titres.

        Args :
            kind : Filtre par type de contenu
            has_external_id : Filtre sur la presence d'un ID TMDB
            text : Recherche plein texte (titre + description), classee par pertinence
            sort : Champ de tri ("title", "local_id", "-updated_at"...), ignore si text
            limit : Nombre maximum de resultats
            skip : Nombre de resultats a sauter
        """
        ...

    @abstractmethod
    def count(
        self,
        kind: Optional[TitleKind] = None,
        has_external_id: Optional[bool] = None,
    ) -> int:
        """Nombre de titres stockes, avec les memes filtres que find."""
        ...
