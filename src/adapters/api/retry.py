"""
Classification des reponses HTTP et retry avec backoff exponentiel.

Toutes les reponses des sources externes passent par check_response, qui
convertit le statut en erreur classee :

- 429 -> RateLimitError (RATE_LIMITED)
- 5xx et erreurs de transport (timeout, connexion) -> TransientError
- autres statuts != 200 -> FatalError

Usage:
    # Avec le decorateur
    @with_retry(max_attempts=5, max_wait=60)
    async def my_api_call():
        ...

    # Avec la fonction helper
    response = await request_with_retry(client, "GET", url)
"""

from typing import Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from src.core.errors import (
    FatalError,
    RateLimitError,
    TransientError,
    classify,
)


def _parse_retry_after(response: httpx.Response) -> Optional[int]:
    header = response.headers.get("Retry-After")
    if header and header.strip().isdigit():
        return int(header.strip())
    return None


def check_response(response: httpx.Response) -> httpx.Response:
    """
    Verifie le statut d'une reponse et leve l'erreur classee correspondante.

    Args:
        response: Reponse httpx recue

    Returns:
        La reponse elle-meme si le statut est 200

    Raises:
        RateLimitError: Statut 429
        TransientError: Statut 5xx
        FatalError: Tout autre statut different de 200
    """
    status = response.status_code
    if status == 200:
        return response
    url = str(response.request.url) if response.request is not None else ""
    if status == 429:
        raise RateLimitError(_parse_retry_after(response))
    if status >= 500:
        raise TransientError(f"Server error {status} for {url}", status_code=status)
    raise FatalError(f"Unexpected status {status} for {url}", status_code=status)


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete unique et classe le resultat (sans retry).

    Les erreurs de transport httpx (timeout, connexion refusee ou reinitialisee)
    sont converties en TransientError.
    """
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.TransportError as e:
        raise TransientError(f"{type(e).__name__} on {url}: {e}") from e
    return check_response(response)


def with_retry(max_attempts: int = 5, max_wait: int = 60):
    """
    Decorateur pour relancer sur erreur relancable avec backoff exponentiel.

    Relance les erreurs RATE_LIMITED et TRANSIENT ; les erreurs FATAL sont
    propagees immediatement. Utilise wait_random_exponential pour ajouter
    du jitter et eviter le "thundering herd" quand plusieurs clients
    relancent en meme temps.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 5)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 60)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception(lambda e: classify(e).retryable),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec retry automatique sur 429 et 5xx.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST, etc.)
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives (defaut: 5)
        **kwargs: Arguments supplementaires passes a client.request()

    Returns:
        httpx.Response en cas de succes

    Raises:
        RateLimitError: Si 429 apres epuisement des tentatives
        TransientError: Si 5xx / erreur reseau apres epuisement des tentatives
        FatalError: Pour les autres statuts, sans retry
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        return await send(client, method, url, **kwargs)

    return await _do_request()
