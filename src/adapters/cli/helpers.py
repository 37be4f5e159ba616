"""
Utilitaires partages pour les commandes CLI de mediacrawl.

Ce module fournit :
- console : instance Rich Console partagee
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container initialise
- stop_on_signals : branche SIGINT/SIGTERM sur l'arret gracieux d'un service
- print_crawl_report / print_sync_report : resumes de fin d'execution
"""

import asyncio
import signal
from contextlib import contextmanager
from functools import wraps
from typing import Callable

from loguru import logger as loguru_logger
from rich.console import Console
from rich.table import Table

from src.container import Container
from src.services.crawler import CrawlReport
from src.services.reconciler import SyncReport

console = Console()


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("src")
    try:
        yield
    finally:
        loguru_logger.enable("src")


def with_container(requires_db: bool = True):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Args:
        requires_db: Si True (defaut), initialise la base de donnees.

    Usage:
        @with_container()
        async def my_command(container, ...):
            config = container.config()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            if requires_db:
                container.database.init()
            return await func(container, *args, **kwargs)
        return wrapper
    return decorator


@contextmanager
def stop_on_signals(stop: Callable[[], None]):
    """
    Branche SIGINT et SIGTERM sur un arret gracieux le temps du bloc.

    Le premier signal arrete les admissions ; les unites en vol se
    terminent puis le tampon est checkpointe et fusionne normalement.
    Doit etre appele depuis la boucle asyncio en cours.
    """
    loop = asyncio.get_running_loop()

    def _handle(signame: str) -> None:
        console.print(f"\n[yellow]{signame} recu : arret apres les unites en cours...[/yellow]")
        stop()

    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _handle, sig.name)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            # Plateformes sans add_signal_handler (Windows)
            loguru_logger.debug(f"Signal {sig.name} non gere par la boucle")
    try:
        yield
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def print_crawl_report(label: str, report: CrawlReport) -> None:
    """Affiche le bilan d'une phase de collecte."""
    table = Table(title=f"Resume {label}", show_header=True)
    table.add_column("Statut", style="bold")
    table.add_column("Unites", justify="right")

    table.add_row("[green]Succes[/green]", str(report.succeeded))
    table.add_row("[red]Echecs[/red]", str(report.failed))
    table.add_row("[yellow]Ignorees[/yellow]", str(report.skipped))
    table.add_row("[dim]Doublons[/dim]", str(report.duplicates))
    table.add_row("Total", str(report.total))
    if report.no_match:
        table.add_row("[yellow]Sans correspondance TMDB[/yellow]", str(report.no_match))
    console.print(table)

    merge = report.merge
    if merge is None:
        console.print("[red]Fusion non effectuee (voir les logs).[/red]")
        return
    if merge.output is not None:
        console.print(
            f"Catalogue [cyan]{merge.output}[/cyan] : {merge.total} titre(s), "
            f"{len(merge.consumed)} checkpoint(s) consomme(s)"
        )
    if merge.corrupt:
        console.print(
            f"[red]{len(merge.corrupt)} checkpoint(s) illisible(s) laisse(s) en place[/red]"
        )


def print_sync_report(report: SyncReport) -> None:
    """Affiche le bilan d'une reconciliation."""
    console.print("\n[bold]Resume:[/bold]")
    console.print(f"  [green]{report.matched}[/green] reconcilie(s)")
    if report.no_match > 0:
        console.print(f"  [yellow]{report.no_match}[/yellow] sans correspondance")
    if report.failed > 0:
        console.print(f"  [red]{report.failed}[/red] echec(s)")
    if report.skipped > 0:
        console.print(f"  [dim]{report.skipped}[/dim] ignore(s)")
