"""
Ensemble de deduplication des unites deja traitees.

Le Frontier est possede par le service qui le cree (crawler) et n'est
jamais partage au niveau module. Il est sur aussi bien entre threads
(persistance dans l'executor) qu'entre taches asyncio.
"""

import threading
from typing import Hashable, Iterable


class Frontier:
    """
    Ensemble "deja vu" avec test-et-ajout atomique.

    Example:
        frontier = Frontier()
        frontier.mark_if_absent("https://host/share/abc")  # True
        frontier.mark_if_absent("https://host/share/abc")  # False
    """

    def __init__(self, initial: Iterable[Hashable] = ()) -> None:
        self._seen: set[Hashable] = set(initial)
        self._lock = threading.Lock()

    def mark_if_absent(self, key: Hashable) -> bool:
        """
        Marque la cle comme vue.

        Returns:
            True uniquement au premier appel pour cette cle
        """
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            return True

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
