"""
Utilitaires et constantes pour mediacrawl.

Ce module contient les constantes et fonctions utilitaires partagees.
"""

from src.utils.constants import (
    CHECKPOINT_FAMILIES,
    CODEC_TAGS,
    QUALITY_TAGS,
)
from src.utils.helpers import clean_title, md5_id, parse_size_mb

__all__ = [
    "CHECKPOINT_FAMILIES",
    "CODEC_TAGS",
    "QUALITY_TAGS",
    "clean_title",
    "md5_id",
    "parse_size_mb",
]
