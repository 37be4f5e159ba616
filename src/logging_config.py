"""
Configuration du logging de mediacrawl via loguru.

Trois sorties :
- console : progression d'une collecte ou d'une resynchronisation
- fichier principal : JSON avec rotation, tout le detail DEBUG (requetes,
  retries, checkpoints)
- journal des echecs : une ligne par unite abandonnee par le pool, avec son
  identifiant, la categorie d'erreur et le nombre de tentatives

Le journal des echecs ne retient que les enregistrements portant le contexte
"unit" (logger.bind(unit=..., attempts=..., error_kind=...)) : il sert de
liste de reprise apres une collecte partielle.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

FAILURE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {extra[error_kind]: <12} | "
    "tentatives={extra[attempts]} | unite={extra[unit]} | {message}"
)


def _is_unit_failure(record) -> bool:
    return "unit" in record["extra"]


def configure_logging(
    log_level: str = "INFO",
    log_file: Path = Path("logs/mediacrawl.log"),
    rotation_size: str = "10 MB",
    retention_count: int = 5,
    failure_file: Optional[Path] = None,
) -> None:
    """Configure les sorties de log d'une execution.

    Args :
        log_level : Niveau minimum sur la console (DEBUG, INFO, WARNING, ERROR)
        log_file : Fichier JSON principal, tous niveaux
        rotation_size : Taille avant rotation (ex: "10 MB", "1 GB")
        retention_count : Nombre de fichiers rotatifs conserves
        failure_file : Journal texte des unites abandonnees (desactive si None)
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_file,
        level="DEBUG",
        format="{message}",
        serialize=True,
        rotation=rotation_size,
        retention=retention_count,
        compression="zip",
        enqueue=True,  # ecritures depuis l'executor (persistance, checkpoints)
    )

    if failure_file is not None:
        failure_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            failure_file,
            level="WARNING",
            format=FAILURE_FORMAT,
            filter=_is_unit_failure,
            rotation=rotation_size,
            retention=retention_count,
        )

    logger.debug(
        "Logging configure",
        log_file=str(log_file),
        failure_file=str(failure_file) if failure_file else None,
    )
