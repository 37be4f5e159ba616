"""
Commande CLI de reconciliation des titres persistes avec TMDB.
"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from src.adapters.cli.commands.crawl_commands import KindOption
from src.adapters.cli.helpers import (
    console,
    print_sync_report,
    stop_on_signals,
    suppress_loguru,
    with_container,
)
from src.core.entities.catalog import AnyTitle, TitleKind
from src.services.reconciler import MatchState


def sync(
    kind: Annotated[
        Optional[KindOption],
        typer.Option("--kind", "-k", help="Type de contenu (movie ou tv). Tous par defaut"),
    ] = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", min=1, help="Nombre maximum de titres a reconcilier"),
    ] = 1000,
    skip: Annotated[
        int,
        typer.Option("--skip", min=0, help="Nombre de titres a sauter"),
    ] = 0,
    only_unmatched: Annotated[
        bool,
        typer.Option("--only-unmatched", help="Ignorer les titres ayant deja un ID TMDB"),
    ] = False,
) -> None:
    """Reconcilie les titres en base avec les metadonnees TMDB."""
    asyncio.run(_sync_async(kind.kind if kind else None, limit, skip, only_unmatched))


@with_container()
async def _sync_async(
    container, kind: Optional[TitleKind], limit: int, skip: int, only_unmatched: bool
) -> None:
    """Implementation async de la commande sync."""
    config = container.config()
    if not config.tmdb_enabled:
        console.print("[red]Erreur:[/red] cle API TMDB non configuree (MEDIACRAWL_TMDB_API_KEY)")
        raise typer.Exit(code=1)

    repository = container.title_repository()
    stored = repository.count(kind, has_external_id=False if only_unmatched else None)
    total = min(limit, max(0, stored - skip))
    if total == 0:
        console.print("[yellow]Aucun titre a reconcilier.[/yellow]")
        return

    reconciler = container.reconciler_service()
    tmdb_client = container.tmdb_client()
    console.print(f"[bold cyan]Reconciliation TMDB[/bold cyan]: jusqu'a {total} titre(s)\n")

    try:
        with suppress_loguru(), stop_on_signals(reconciler.stop):
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeRemainingColumn(),
                console=console,
                transient=False,
            ) as progress:
                task = progress.add_task("[cyan]Reconciliation...", total=total)

                def on_progress(title: AnyTitle, state: MatchState) -> None:
                    """Callback de progression."""
                    progress.advance(task)
                    if state is MatchState.MATCHED:
                        progress.console.print(f"  [green]✓[/green] {title.title}")
                    elif state is MatchState.NO_MATCH:
                        progress.console.print(f"  [yellow]?[/yellow] {title.title} - aucun candidat")
                    else:
                        progress.console.print(f"  [red]✗[/red] {title.title} - echec")
                    progress.update(task, description="[cyan]Reconciliation...")

                def on_state(title: AnyTitle, state: MatchState) -> None:
                    if state is MatchState.SEARCHING:
                        progress.update(task, description=f"[cyan]Recherche: {title.title}")

                report = await reconciler.reconcile_all(
                    kind=kind,
                    limit=limit,
                    skip=skip,
                    only_unmatched=only_unmatched,
                    progress_callback=on_progress,
                    state_callback=on_state,
                )
    finally:
        await tmdb_client.close()

    print_sync_report(report)
