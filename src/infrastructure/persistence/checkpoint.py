"""
Checkpoints sur disque et fusion idempotente du catalogue.

Chaque checkpoint ecrit un artefact temporaire unique :
    <temp_dir>/<famille>_<YYYYmmdd_HHMMSS_ffffff>_<hex8>.json

A la finalisation, l'artefact canonique <catalog_dir>/<famille>_final.json
puis les temporaires (tries par nom) sont appliques dans une table indexee
par ID local (la derniere ecriture gagne). Le resultat, trie par ID local,
remplace atomiquement l'artefact canonique et les temporaires consommes
sont supprimes. Meme entree -> meme sortie, octet pour octet.
"""

import os
import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger
from pydantic import ValidationError

from src.core.entities.catalog import AnyTitle, TitleKind
from src.core.entities.serialization import dump_titles, load_titles
from src.utils.constants import (
    CHECKPOINT_FAMILIES,
    FAMILY_MOVIE,
    FAMILY_MOVIE_INDEX,
)


def family_kind(family: str) -> TitleKind:
    """Type de contenu des titres d'une famille d'artefacts."""
    if family not in CHECKPOINT_FAMILIES:
        raise ValueError(f"Famille de checkpoint inconnue: {family}")
    return TitleKind.MOVIE if family in (FAMILY_MOVIE, FAMILY_MOVIE_INDEX) else TitleKind.SERIES


def _atomic_write(path: Path, data: bytes) -> None:
    """Ecrit dans un fichier voisin puis le renomme (os.replace)."""
    tmp_path = path.with_name(f".{path.name}.{secrets.token_hex(4)}.part")
    try:
        with open(tmp_path, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


@dataclass
class MergeResult:
    """
    Bilan d'une fusion.

    Attributes:
        family: Famille fusionnee
        total: Nombre de titres dans l'artefact canonique
        consumed: Temporaires appliques puis supprimes
        corrupt: Temporaires illisibles laisses en place
        output: Chemin de l'artefact canonique (None si rien a ecrire)
    """

    family: str
    total: int = 0
    consumed: list[Path] = field(default_factory=list)
    corrupt: list[Path] = field(default_factory=list)
    output: Optional[Path] = None


class CheckpointStore:
    """
    Stockage des artefacts de checkpoint et du catalogue canonique.

    Les methodes sont synchrones (I/O disque) : les appelants async les
    deportent dans l'executor.
    """

    def __init__(self, temp_dir: Path, catalog_dir: Path) -> None:
        self.temp_dir = Path(temp_dir)
        self.catalog_dir = Path(catalog_dir)

    def canonical_path(self, family: str) -> Path:
        return self.catalog_dir / f"{family}_final.json"

    def temporaries(self, family: str) -> list[Path]:
        """Artefacts temporaires d'une famille, tries par nom."""
        if not self.temp_dir.exists():
            return []
        # "tv" ne doit pas capturer "tv_index_..."
        pattern = re.compile(rf"^{re.escape(family)}_\d{{8}}_\d{{6}}_\d{{6}}_[0-9a-f]{{8}}\.json$")
        return sorted(p for p in self.temp_dir.iterdir() if pattern.match(p.name))

    def save(self, family: str, titles: Sequence[AnyTitle]) -> Optional[Path]:
        """
        Ecrit un artefact temporaire pour les titres donnes.

        Returns:
            Chemin de l'artefact, ou None si aucun titre
        """
        if not titles:
            return None
        kind = family_kind(family)
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        path = self.temp_dir / f"{family}_{stamp}_{secrets.token_hex(4)}.json"
        _atomic_write(path, dump_titles(kind, titles))
        logger.info(f"Checkpoint {family}: {len(titles)} titre(s) -> {path.name}")
        return path

    def load(self, family: str) -> list[AnyTitle]:
        """
        Charge l'artefact canonique d'une famille (liste vide s'il n'existe pas).

        Raises:
            ValidationError: Si l'artefact canonique est illisible
        """
        path = self.canonical_path(family)
        if not path.exists():
            return []
        return load_titles(family_kind(family), path.read_bytes())

    def merge(self, family: str) -> MergeResult:
        """
        Fusionne canonique + temporaires dans l'artefact canonique.

        Un artefact canonique illisible interrompt la fusion sans rien
        modifier ; un temporaire illisible est journalise et laisse en place.
        """
        kind = family_kind(family)
        result = MergeResult(family=family)

        try:
            merged: dict[str, AnyTitle] = {t.local_id: t for t in self.load(family)}
        except (OSError, ValidationError) as e:
            logger.error(f"Artefact canonique {family} illisible, fusion annulee: {e}")
            return result

        for path in self.temporaries(family):
            try:
                titles = load_titles(kind, path.read_bytes())
            except (OSError, ValidationError) as e:
                logger.error(f"Checkpoint illisible laisse en place: {path.name}: {e}")
                result.corrupt.append(path)
                continue
            for title in titles:
                merged[title.local_id] = title
            result.consumed.append(path)

        if not merged:
            logger.info(f"Fusion {family}: aucun titre")
            return result

        ordered = [merged[key] for key in sorted(merged)]
        self.catalog_dir.mkdir(parents=True, exist_ok=True)
        output = self.canonical_path(family)
        _atomic_write(output, dump_titles(kind, ordered))
        result.total = len(ordered)
        result.output = output

        for path in result.consumed:
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Suppression impossible de {path.name}: {e}")

        logger.info(
            f"Fusion {family}: {result.total} titre(s), "
            f"{len(result.consumed)} checkpoint(s) consomme(s)"
        )
        return result
