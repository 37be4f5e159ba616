"""
Modeles SQLModel pour la base de donnees mediacrawl.

Ces modeles representent les tables de la base de donnees SQLite.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- titles: Collection de documents (un titre complet serialise en JSON),
  indexee par (type, ID local) : films et series ont chacun leur espace de cles

Les colonnes hors document (kind, title, description, external_id) servent
au filtrage, au tri et a la recherche plein texte.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Text, UniqueConstraint
from sqlmodel import Field, Index, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TitleDocumentModel(SQLModel, table=True):
    """
    Document d'un titre (film ou serie).

    document_json contient l'arbre complet (saisons, episodes, sources,
    fichiers, liens et metadonnees TMDB).
    """

    __tablename__ = "titles"
    __table_args__ = (
        UniqueConstraint("kind", "local_id", name="uq_titles_kind_local_id"),
        Index("idx_titles_kind_title", "kind", "title"),
    )

    id: int | None = Field(default=None, primary_key=True)
    local_id: str = Field(index=True)
    kind: str = Field(index=True)  # "movie" | "tv"
    title: str = Field(default="", index=True)
    description: str = Field(default="")
    external_id: int | None = Field(default=None, index=True)
    document_json: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
