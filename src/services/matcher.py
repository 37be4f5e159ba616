"""
Service de scoring pour le matching des titres avec les resultats TMDB.

Formule par candidat (i = rang TMDB, a partir de 0):
- titre : 50 si titres normalises egaux, sinon 40 * (1 - lev / max(len))
- annee : 30 exacte, 20 a +/-1, 10 a +/-2, 0 sinon ou inconnue
- popularite : min(20, popularite) * (1 - i * 0.1)

Le meilleur candidat n'est retenu que si son total atteint le seuil (30).
Departage : meilleur score titre, puis rang TMDB le plus faible.

Le scoring est deterministe pour des resultats reproductibles.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from rapidfuzz.distance import Levenshtein

from src.core.ports.api_clients import MetadataSearchResult

# Annee dans un nom de fichier : 19xx ou 20xx delimite par des frontieres de mot
_FILENAME_YEAR_PATTERN = re.compile(r"\b(19\d{2}|20\d{2})\b")
# Annee entre parentheses en fin de titre : "Alpha (2020)"
_TITLE_YEAR_PATTERN = re.compile(r"\((\d{4})\)")


@dataclass(frozen=True)
class MatchWeights:
    """
    Poids du scoring, surchargeables par configuration.

    Attributes:
        exact_title: Score d'un titre normalise identique
        fuzzy_title: Score maximal d'un titre approche (pondere par Levenshtein)
        year_exact / year_close / year_near: Annee exacte, a +/-1, a +/-2
        popularity_cap: Plafond de la popularite prise en compte
        rank_decay: Decote de popularite par rang TMDB
        threshold: Total minimal pour accepter un candidat
    """

    exact_title: float = 50.0
    fuzzy_title: float = 40.0
    year_exact: float = 30.0
    year_close: float = 20.0
    year_near: float = 10.0
    popularity_cap: float = 20.0
    rank_decay: float = 0.1
    threshold: float = 30.0


@dataclass
class MatchCandidate:
    """Resultat TMDB avec ses composantes de score (non persiste)."""

    result: MetadataSearchResult
    rank: int
    title_score: float = 0.0
    year_score: float = 0.0
    popularity_score: float = 0.0

    @property
    def total(self) -> float:
        return self.title_score + self.year_score + self.popularity_score


def normalize_title(title: str) -> str:
    """Normalisation de comparaison : minuscules, espaces de bord retires."""
    return title.strip().lower()


def extract_year(filename: str) -> str:
    """
    Premiere annee plausible (1900 a annee courante) d'un nom de fichier.

    Returns:
        L'annee sous forme de chaine, ou "" si absente

    Example:
        extract_year("Movie.Title.1999.BluRay.mp4") -> "1999"
    """
    current_year = date.today().year
    for match in _FILENAME_YEAR_PATTERN.finditer(filename):
        year = int(match.group(1))
        if 1900 <= year <= current_year:
            return match.group(1)
    return ""


def split_title_year(title: str) -> tuple[str, Optional[int]]:
    """
    Separe un titre de son annee entre parentheses, ou qu'elle soit.

    La premiere parenthese a quatre chiffres est retiree et les espaces
    sont normalises.

    Example:
        split_title_year("Alpha (2020) Remastered") -> ("Alpha Remastered", 2020)
    """
    match = _TITLE_YEAR_PATTERN.search(title)
    if match is None:
        return " ".join(title.split()), None
    remainder = title[: match.start()] + " " + title[match.end() :]
    return " ".join(remainder.split()), int(match.group(1))


def _title_score(query: str, candidate: str, weights: MatchWeights) -> float:
    q = normalize_title(query)
    c = normalize_title(candidate)
    if q == c:
        return weights.exact_title
    longest = max(len(q), len(c))
    if longest == 0:
        return 0.0
    distance = Levenshtein.distance(q, c)
    return weights.fuzzy_title * (1 - distance / longest)


def _year_score(query_year: Optional[int], candidate_year: Optional[int], weights: MatchWeights) -> float:
    if query_year is None or candidate_year is None:
        return 0.0
    diff = abs(query_year - candidate_year)
    if diff == 0:
        return weights.year_exact
    if diff == 1:
        return weights.year_close
    if diff == 2:
        return weights.year_near
    return 0.0


def _popularity_score(popularity: float, rank: int, weights: MatchWeights) -> float:
    return min(weights.popularity_cap, popularity) * (1 - rank * weights.rank_decay)


class MatcherService:
    """
    Service de scoring des resultats de recherche TMDB.

    Example:
        matcher = MatcherService()
        best = matcher.select_best("Alpha", 2020, results)
        if best:
            print(best.result.id, best.total)
    """

    def __init__(self, weights: Optional[MatchWeights] = None) -> None:
        self.weights = weights or MatchWeights()

    def score_candidates(
        self,
        query_title: str,
        query_year: Optional[int],
        results: list[MetadataSearchResult],
    ) -> list[MatchCandidate]:
        """
        Score chaque resultat et trie par total decroissant.

        Departage : score titre decroissant, puis rang TMDB croissant.
        """
        candidates = [
            MatchCandidate(
                result=result,
                rank=rank,
                title_score=_title_score(query_title, result.title, self.weights),
                year_score=_year_score(query_year, result.year, self.weights),
                popularity_score=_popularity_score(result.popularity, rank, self.weights),
            )
            for rank, result in enumerate(results)
        ]
        candidates.sort(key=lambda c: (-c.total, -c.title_score, c.rank))
        return candidates

    def is_acceptable(self, candidate: MatchCandidate) -> bool:
        return candidate.total >= self.weights.threshold

    def select_best(
        self,
        query_title: str,
        query_year: Optional[int],
        results: list[MetadataSearchResult],
    ) -> Optional[MatchCandidate]:
        """Meilleur candidat si son total atteint le seuil, sinon None."""
        candidates = self.score_candidates(query_title, query_year, results)
        if not candidates or not self.is_acceptable(candidates[0]):
            return None
        return candidates[0]
