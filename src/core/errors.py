"""
Taxonomie des erreurs du pipeline d'acquisition.

Chaque erreur porte son ErrorKind, fixe au point de detection (statut HTTP,
erreur reseau, schema invalide). Le pool de workers decide de relancer ou
d'abandonner une unite uniquement a partir de ce champ.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Categorie d'erreur d'une tache de collecte."""

    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    FATAL = "fatal"
    PARTIAL_FAILURE = "partial_failure"

    @property
    def retryable(self) -> bool:
        """Vrai si une nouvelle tentative peut reussir."""
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.TRANSIENT)


class FetchError(Exception):
    """
    Erreur levee par un adaptateur de source (site d'index, hebergeur, TMDB).

    Attributes:
        kind: Categorie de l'erreur
        status_code: Statut HTTP a l'origine de l'erreur, si applicable
    """

    kind: ErrorKind = ErrorKind.FATAL

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(FetchError):
    """
    Exception levee quand la source retourne 429 Too Many Requests.

    Attributes:
        retry_after: Nombre de secondes a attendre (header Retry-After),
                     ou None si non specifie.
    """

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s", status_code=429)


class TransientError(FetchError):
    """Erreur reseau, timeout ou 5xx : la requete peut etre relancee."""

    kind = ErrorKind.TRANSIENT


class FatalError(FetchError):
    """Statut 4xx (hors 429) ou reponse inexploitable : pas de retry."""

    kind = ErrorKind.FATAL


class SchemaError(FatalError):
    """Reponse decodee mais champs attendus absents ou malformes."""


def classify(error: BaseException) -> ErrorKind:
    """
    Retourne la categorie d'une exception quelconque.

    Les exceptions qui ne sont pas des FetchError (bugs, KeyError...) sont
    considerees fatales : elles ne seront pas relancees.
    """
    if isinstance(error, FetchError):
        return error.kind
    return ErrorKind.FATAL
