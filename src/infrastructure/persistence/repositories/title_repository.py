"""
Implementation SQLModel du repository de titres.

Implemente l'interface ITitleRepository : chaque titre est stocke comme un
document JSON complet, indexe par le couple (type, ID local) : un film et
une serie peuvent partager le meme ID local. La recherche plein texte
pre-filtre en SQL (LIKE) puis classe les lignes par pertinence avec
rapidfuzz.
"""

from datetime import datetime, timezone
from typing import Optional

from loguru import logger
from rapidfuzz import fuzz, utils
from sqlalchemy import Engine, and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from src.core.entities.catalog import AnyTitle, TitleKind
from src.core.entities.serialization import title_from_json, title_to_json
from src.core.ports.repositories import ITitleRepository
from src.infrastructure.persistence.models import TitleDocumentModel
from src.utils.helpers import normalize_accents, search_variants

_SORT_FIELDS = {
    "local_id": TitleDocumentModel.local_id,
    "title": TitleDocumentModel.title,
    "external_id": TitleDocumentModel.external_id,
    "created_at": TitleDocumentModel.created_at,
    "updated_at": TitleDocumentModel.updated_at,
}


def _relevance(query: str, model: TitleDocumentModel) -> float:
    """Pertinence d'une ligne : le titre pese plus que la description."""
    q = normalize_accents(query)
    title_score = fuzz.WRatio(q, normalize_accents(model.title), processor=utils.default_process)
    desc_score = 0.0
    if model.description:
        desc_score = 0.8 * fuzz.partial_ratio(
            q, normalize_accents(model.description), processor=utils.default_process
        )
    return max(title_score, desc_score)


def _apply_filters(statement, kind: Optional[TitleKind], has_external_id: Optional[bool]):
    if kind is not None:
        statement = statement.where(TitleDocumentModel.kind == kind.value)
    if has_external_id is True:
        statement = statement.where(TitleDocumentModel.external_id.isnot(None))
    elif has_external_id is False:
        statement = statement.where(TitleDocumentModel.external_id.is_(None))
    return statement


class SQLModelTitleRepository(ITitleRepository):
    """
    Repository SQLModel pour les titres du catalogue.

    Ouvre une session par operation : le repository est appele depuis
    l'executor (threads) par le crawler.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def _to_entity(self, model: TitleDocumentModel) -> AnyTitle:
        title = title_from_json(TitleKind(model.kind), model.document_json)
        if not title.local_id:
            title.local_id = model.local_id
        return title

    def _key_clause(self, local_id: str, kind: TitleKind):
        return and_(
            TitleDocumentModel.kind == kind.value,
            TitleDocumentModel.local_id == local_id,
        )

    def _to_model(self, entity: AnyTitle) -> TitleDocumentModel:
        return TitleDocumentModel(
            local_id=entity.local_id,
            kind=entity.kind.value,
            title=entity.title,
            description=entity.description or "",
            external_id=entity.external_id,
            document_json=title_to_json(entity),
        )

    def insert_if_absent(self, title: AnyTitle) -> bool:
        """Insere le titre ; une cle deja presente est ignoree sans erreur."""
        with Session(self._engine) as session:
            existing = session.exec(
                select(TitleDocumentModel.id).where(
                    self._key_clause(title.local_id, title.kind)
                )
            ).first()
            if existing is not None:
                return False
            session.add(self._to_model(title))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.debug(f"Titre {title.local_id} deja present (insertion concurrente)")
                return False
        return True

    def find_by_key(self, local_id: str, kind: TitleKind) -> Optional[AnyTitle]:
        with Session(self._engine) as session:
            model = session.exec(
                select(TitleDocumentModel).where(self._key_clause(local_id, kind))
            ).first()
            if model:
                return self._to_entity(model)
        return None

    def update_by_key(self, title: AnyTitle) -> bool:
        """Remplace le document et les colonnes de recherche du titre."""
        with Session(self._engine) as session:
            model = session.exec(
                select(TitleDocumentModel).where(
                    self._key_clause(title.local_id, title.kind)
                )
            ).first()
            if model is None:
                return False
            model.title = title.title
            model.description = title.description or ""
            model.external_id = title.external_id
            model.document_json = title_to_json(title)
            model.updated_at = datetime.now(timezone.utc)
            session.add(model)
            session.commit()
        return True

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
        Recherche filtree, triee et paginee.

        Avec text, chaque mot doit apparaitre dans le titre ou la
        description (LIKE, variantes de casse et ligatures), puis les
        lignes sont classees par pertinence decroissante.

        Raises:
            ValueError: Champ de tri inconnu
        """
        statement = _apply_filters(select(TitleDocumentModel), kind, has_external_id)

        query = (text or "").strip()
        if query:
            word_clauses = []
            for word in query.split():
                variants = search_variants(word)
                word_clauses.append(
                    or_(
                        *[TitleDocumentModel.title.contains(v) for v in variants],
                        *[TitleDocumentModel.description.contains(v) for v in variants],
                    )
                )
            statement = statement.where(and_(*word_clauses))
            with Session(self._engine) as session:
                models = session.exec(statement).all()
                ranked = sorted(
                    models,
                    key=lambda m: (-_relevance(query, m), m.local_id),
                )
                return [self._to_entity(m) for m in ranked[skip : skip + limit]]

        if sort:
            descending = sort.startswith("-")
            field_name = sort.lstrip("-")
            column = _SORT_FIELDS.get(field_name)
            if column is None:
                raise ValueError(f"Champ de tri inconnu: {sort}")
            statement = statement.order_by(column.desc() if descending else column.asc())
        else:
            statement = statement.order_by(TitleDocumentModel.id)

        statement = statement.offset(skip).limit(limit)
        with Session(self._engine) as session:
            return [self._to_entity(m) for m in session.exec(statement).all()]

    def count(
        self,
        kind: Optional[TitleKind] = None,
        has_external_id: Optional[bool] = None,
    ) -> int:
        """Nombre de titres stockes (par type, avec ou sans ID TMDB)."""
        statement = _apply_filters(
            select(func.count(TitleDocumentModel.id)), kind, has_external_id
        )
        with Session(self._engine) as session:
            return session.exec(statement).one()
