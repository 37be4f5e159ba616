"""
Serialisation JSON des titres via pydantic TypeAdapter.

Les entites sont des dataclasses standard ; pydantic se charge de la
validation a la lecture (artefacts de checkpoint, documents en base) et du
dump JSON (dates ISO). Un adaptateur par type de contenu.
"""

from functools import lru_cache
from typing import Sequence, Union

from pydantic import TypeAdapter

from src.core.entities.catalog import AnyTitle, TitleKind, title_class


@lru_cache(maxsize=None)
def _title_adapter(kind: TitleKind) -> TypeAdapter:
    return TypeAdapter(title_class(kind))


@lru_cache(maxsize=None)
def _list_adapter(kind: TitleKind) -> TypeAdapter:
    return TypeAdapter(list[title_class(kind)])


def dump_titles(kind: TitleKind, titles: Sequence[AnyTitle]) -> bytes:
    """Serialise une liste de titres en tableau JSON indente."""
    return _list_adapter(kind).dump_json(list(titles), indent=2)


def load_titles(kind: TitleKind, data: Union[str, bytes]) -> list[AnyTitle]:
    """
    Decode un tableau JSON de titres.

    Raises:
        pydantic.ValidationError: Si le contenu ne respecte pas le schema
    """
    return _list_adapter(kind).validate_json(data)


def title_to_json(title: AnyTitle) -> str:
    """Serialise un titre unique (document de la base)."""
    return _title_adapter(title.kind).dump_json(title).decode("utf-8")


def title_from_json(kind: TitleKind, data: Union[str, bytes]) -> AnyTitle:
    """Decode un titre unique."""
    return _title_adapter(kind).validate_json(data)
