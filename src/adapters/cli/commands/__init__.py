"""Sous-package CLI commands - re-exporte les commandes publiques."""

from src.adapters.cli.commands.crawl_commands import (
    KindOption,
    crawl,
    discover,
    merge,
)
from src.adapters.cli.commands.sync_commands import (
    sync,
)

__all__ = [
    # collecte
    "KindOption",
    "discover",
    "crawl",
    "merge",
    # reconciliation
    "sync",
]
