"""
Pool de workers a concurrence bornee, avec pacing et retry.

WorkerPool execute une tache async par unite de decouverte sous deux
limites : au plus max_concurrency taches en vol (asyncio.Semaphore) et un
espacement minimal request_interval entre deux demarrages (horloge de
pacing partagee).

Politique de retry (unique, reutilisee par toutes les phases) :
- RATE_LIMITED et TRANSIENT : relance avec backoff retry_delay * 2^n
  (attentes retry_delay, 2*retry_delay, 4*retry_delay...), au plus
  max_retries tentatives au total
- FATAL : pas de relance, unite abandonnee

Arret gracieux : stop() interrompt l'admission ; les taches en vol se
terminent normalement et les unites jamais admises sont comptees skipped.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Hashable, Iterable, Optional

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from src.core.errors import ErrorKind, classify

SleepFunc = Callable[[float], Awaitable[None]]
ClockFunc = Callable[[], float]


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"Tentative {retry_state.attempt_number} echouee ({classify(error).value}): "
        f"{error} - nouvelle tentative dans {wait:.1f}s"
    )


def build_retrying(
    max_retries: int,
    retry_delay: float,
    sleep: Optional[SleepFunc] = None,
) -> AsyncRetrying:
    """
    Construit la politique de retry partagee.

    Args:
        max_retries: Nombre maximum de tentatives au total (>= 1)
        retry_delay: Delai de base du backoff en secondes
        sleep: Fonction d'attente injectable (tests)

    Returns:
        AsyncRetrying relancant uniquement les erreurs RATE_LIMITED/TRANSIENT
    """
    kwargs: dict[str, Any] = {}
    if sleep is not None:
        kwargs["sleep"] = sleep
    return AsyncRetrying(
        retry=retry_if_exception(lambda e: classify(e).retryable),
        wait=wait_exponential(multiplier=retry_delay, exp_base=2),
        stop=stop_after_attempt(max(1, max_retries)),
        before_sleep=_log_retry,
        reraise=True,
        **kwargs,
    )


async def call_with_retry(
    func: Callable[..., Awaitable[Any]],
    *args: Any,
    max_retries: int,
    retry_delay: float,
    sleep: Optional[SleepFunc] = None,
) -> Any:
    """Appelle func avec la politique de retry partagee."""
    retrying = build_retrying(max_retries, retry_delay, sleep)
    return await retrying(func, *args)


@dataclass
class TaskFailure:
    """
    Echec definitif d'une unite.

    Attributes:
        unit: Unite abandonnee
        kind: Categorie de la derniere erreur
        attempts: Nombre de tentatives effectuees
        error: Message de la derniere erreur
    """

    unit: Hashable
    kind: ErrorKind
    attempts: int
    error: str


@dataclass
class PoolReport:
    """Bilan d'une execution du pool."""

    succeeded: list[Hashable] = field(default_factory=list)
    failures: list[TaskFailure] = field(default_factory=list)
    skipped: int = 0
    stopped: bool = False

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return len(self.succeeded) + self.failed + self.skipped


class _Pacer:
    """Horloge de pacing partagee : espace les demarrages d'au moins interval."""

    def __init__(self, interval: float, clock: ClockFunc, sleep: SleepFunc) -> None:
        self._interval = interval
        self._clock = clock
        self._sleep = sleep
        self._next = 0.0
        self._lock = asyncio.Lock()

    async def wait(self) -> None:
        if self._interval <= 0:
            return
        async with self._lock:
            now = self._clock()
            start = max(now, self._next)
            self._next = start + self._interval
        if start > now:
            await self._sleep(start - now)


class WorkerPool:
    """
    Pool de workers asyncio avec pacing, retry et arret gracieux.

    Example:
        pool = WorkerPool(max_concurrency=5, request_interval=2.0)
        report = await pool.run(pages, fetch_page)
        print(f"{len(report.succeeded)} ok, {report.failed} echecs")
    """

    def __init__(
        self,
        max_concurrency: int = 5,
        request_interval: float = 2.0,
        max_retries: int = 3,
        retry_delay: float = 2.0,
        sleep: Optional[SleepFunc] = None,
        clock: Optional[ClockFunc] = None,
    ) -> None:
        """
        Args:
            max_concurrency: Nombre maximum de taches en vol
            request_interval: Espacement minimal entre deux demarrages (s)
            max_retries: Tentatives maximum par unite (total)
            retry_delay: Delai de base du backoff (s)
            sleep: Fonction d'attente injectable (defaut asyncio.sleep)
            clock: Horloge monotone injectable (defaut time.monotonic)
        """
        self.max_concurrency = max(1, max_concurrency)
        self.request_interval = request_interval
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._sleep: SleepFunc = sleep or asyncio.sleep
        self._clock: ClockFunc = clock or time.monotonic
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        """Interrompt l'admission de nouvelles unites (les taches en vol finissent)."""
        if not self._stop_event.is_set():
            logger.warning("Arret demande : plus aucune nouvelle unite ne sera admise")
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    async def call(self, func: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """Execute un appel isole avec la politique de retry du pool."""
        return await call_with_retry(
            func,
            *args,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            sleep=self._sleep,
        )

    async def run(
        self,
        units: Iterable[Hashable],
        task: Callable[[Hashable], Awaitable[Any]],
        on_success: Optional[Callable[[Hashable, Any], Awaitable[None]]] = None,
    ) -> PoolReport:
        """
        Execute task pour chaque unite.

        Args:
            units: Unites de decouverte (numeros de page, IDs de titre...)
            task: Coroutine de collecte d'une unite
            on_success: Callback async appele avec (unite, resultat) apres succes

        Returns:
            PoolReport avec succes, echecs (kind + tentatives) et skipped
        """
        report = PoolReport()
        semaphore = asyncio.Semaphore(self.max_concurrency)
        pacer = _Pacer(self.request_interval, self._clock, self._sleep)
        pending = list(units)
        in_flight: set[asyncio.Task] = set()

        async def _execute(unit: Hashable) -> None:
            attempts = 0

            async def _attempt() -> Any:
                nonlocal attempts
                attempts += 1
                return await task(unit)

            try:
                await pacer.wait()
                result = await self.call(_attempt)
            except Exception as e:
                kind = classify(e)
                report.failures.append(TaskFailure(unit, kind, attempts, str(e)))
                logger.bind(unit=str(unit), attempts=attempts, error_kind=kind.value).error(
                    f"Unite {unit} abandonnee apres {attempts} tentative(s) "
                    f"({kind.value}): {e}"
                )
            else:
                report.succeeded.append(unit)
                if attempts > 1:
                    logger.info(f"Unite {unit} reussie apres {attempts} tentatives")
                if on_success is not None:
                    await on_success(unit, result)
            finally:
                semaphore.release()

        admitted = 0
        for unit in pending:
            await semaphore.acquire()
            if self._stop_event.is_set():
                semaphore.release()
                break
            admitted += 1
            t = asyncio.create_task(_execute(unit))
            in_flight.add(t)
            t.add_done_callback(in_flight.discard)

        if in_flight:
            await asyncio.gather(*in_flight)

        report.skipped = len(pending) - admitted
        report.stopped = self._stop_event.is_set()
        if report.skipped:
            logger.warning(f"{report.skipped} unite(s) non admise(s) (arret)")
        return report
