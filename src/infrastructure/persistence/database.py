"""
Configuration de la base de donnees SQLite pour mediacrawl.

Ce module fournit :
- Creation de l'engine SQLite (multi-thread : les ecritures passent par l'executor)
- Session factory avec context manager
- Fonction d'initialisation des tables

Aucun engine global : l'engine est cree par le container a partir de
MEDIACRAWL_DATABASE_URL (defaut: sqlite:///mediacrawl.db).
"""

from collections.abc import Generator
from pathlib import Path

from sqlalchemy import Engine
from sqlmodel import Session, SQLModel, create_engine


def create_db_engine(database_url: str) -> Engine:
    """
    Cree l'engine SQLAlchemy.

    Cree le repertoire parent si l'URL designe un fichier SQLite.
    """
    if database_url.startswith("sqlite:///") and not database_url.startswith("sqlite:///:memory:"):
        db_path = Path(database_url.replace("sqlite:///", ""))
        db_path.parent.mkdir(exist_ok=True, parents=True)

    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, echo=False, connect_args=connect_args)


def get_session(engine: Engine) -> Generator[Session, None, None]:
    """
    Generateur de session SQLModel.

    Ou avec context manager :
        with Session(engine) as session:
            # operations
    """
    with Session(engine) as session:
        yield session


def init_db(engine: Engine) -> Engine:
    """
    Initialise la base de donnees en creant toutes les tables.

    Importe les modeles pour enregistrer leurs metadonnees dans
    SQLModel.metadata, puis cree les tables si elles n'existent pas.
    """
    from src.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    return engine
