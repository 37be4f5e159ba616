"""
Clients API externes.

Ce module fournit les adaptateurs pour communiquer avec les sources externes:
- TMDB: The Movie Database (fournisseur de metadonnees)

Infrastructure partagee:
- APICache: Cache persistant avec TTL differencies (recherche 24h, details 7j)
- check_response / send: Classification des statuts HTTP en ErrorKind
- with_retry / request_with_retry: Backoff exponentiel sur 429 et 5xx

Les clients implementent les ports definis dans core/ports/.
"""

from src.adapters.api.cache import APICache, cache_key
from src.adapters.api.retry import (
    check_response,
    request_with_retry,
    send,
    with_retry,
)

__all__ = [
    "APICache",
    "cache_key",
    "check_response",
    "send",
    "with_retry",
    "request_with_retry",
]
