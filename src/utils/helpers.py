"""
Fonctions utilitaires partagees dans le projet mediacrawl.

Ce module centralise les fonctions reutilisees a travers le codebase :
- clean_title : nettoyage des titres issus du HTML ou des API
- normalize_accents : suppression des diacritiques pour comparaison
- search_variants : variantes de casse / ligatures pour les recherches LIKE
- parse_size_mb : taille affichee ("1.5 GB") -> megaoctets entiers
- md5_id : identifiant stable derive d'une cle
"""

import hashlib
import re
import unicodedata
from typing import Optional
from urllib.parse import urlparse

from src.utils.constants import SIZE_UNITS


def strip_invisible_chars(text: str) -> str:
    """
    Retire les caractères Unicode invisibles d'une chaîne.

    Supprime les caractères de contrôle et les marques directionnelles
    qui peuvent provenir des APIs (LRM, RLM, BOM, etc.).
    """
    result = []
    for char in text:
        category = unicodedata.category(char)
        if category in ("Cf", "Cc"):
            continue
        result.append(char)
    return "".join(result)


def clean_title(title: str) -> str:
    """Nettoie un titre : retire les caractères invisibles et les espaces superflus."""
    if not title:
        return title
    return " ".join(strip_invisible_chars(title).split())


_LIGATURE_MAP = {"œ": "oe", "Œ": "Oe", "æ": "ae", "Æ": "Ae"}
_REVERSE_LIGATURE_MAP = {v: k for k, v in _LIGATURE_MAP.items()}


def search_variants(query: str) -> list[str]:
    """
    Génère les variantes de recherche pour gérer les ligatures.

    SQLite LIKE est case-insensitive pour ASCII uniquement.
    Pour les ligatures Unicode (œ, æ), il faut générer toutes
    les combinaisons casse + forme (ligature vs digraphe).
    """
    variants = {query, query.lower(), query.capitalize()}
    expanded = query
    for lig, exp in _LIGATURE_MAP.items():
        expanded = expanded.replace(lig, exp)
    variants.update({expanded, expanded.lower(), expanded.capitalize()})
    collapsed = query.lower()
    for exp, lig in _REVERSE_LIGATURE_MAP.items():
        collapsed = collapsed.replace(exp, lig)
    variants.update({collapsed, collapsed.capitalize()})
    return sorted(variants)


def normalize_accents(text: str) -> str:
    """
    Supprime les accents d'une chaine pour une comparaison insensible aux accents.

    Utilise la decomposition NFD puis filtre les caracteres diacritiques (Mn).
    """
    normalized = unicodedata.normalize("NFD", text)
    return "".join(char for char in normalized if unicodedata.category(char) != "Mn")


_SIZE_PATTERN = re.compile(r"([\d.,]+)\s*([KMGT]?i?B)", re.IGNORECASE)


def parse_size_mb(size: str, size_bytes: Optional[int] = None) -> int:
    """
    Convertit une taille en megaoctets entiers.

    Les octets, quand l'hebergeur les fournit, font foi. Sinon la chaine
    affichee est interpretee ("1.5 GB", "700 MB", "512 KB"). Une chaine
    illisible donne 0.

    Examples:
        parse_size_mb("1.5 GB") -> 1536
        parse_size_mb("", size_bytes=3 * 1024 * 1024) -> 3
    """
    if size_bytes:
        return int(size_bytes // (1024 * 1024))
    if not size:
        return 0
    match = _SIZE_PATTERN.search(size)
    if match is None:
        return 0
    try:
        value = float(match.group(1).replace(",", "."))
    except ValueError:
        return 0
    unit = match.group(2).upper().replace("I", "")
    return int(value * SIZE_UNITS.get(unit, 0))


def md5_id(key: str) -> str:
    """Identifiant hexadecimal stable (MD5) d'une cle de regroupement."""
    return hashlib.md5(key.encode("utf-8")).hexdigest()


def share_key_from_link(share_link: str) -> str:
    """
    Cle de partage : dernier segment du chemin du lien de partage.

    Example:
        share_key_from_link("https://www.febbox.com/share/abc123") -> "abc123"
    """
    path = urlparse(share_link).path.rstrip("/")
    return path.rsplit("/", 1)[-1]
