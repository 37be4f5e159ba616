"""
Commandes CLI de collecte : decouverte des pages d'index, extraction des
titres et fusion manuelle des checkpoints.
"""

import asyncio
from enum import Enum
from typing import Annotated, Optional

import typer

from src.adapters.cli.helpers import (
    console,
    print_crawl_report,
    stop_on_signals,
    with_container,
)
from src.core.entities.catalog import TitleKind
from src.utils.constants import CHECKPOINT_FAMILIES


class KindOption(str, Enum):
    """Type de contenu a collecter."""

    MOVIE = "movie"
    TV = "tv"

    @property
    def kind(self) -> TitleKind:
        return TitleKind(self.value)


def discover(
    kind: Annotated[
        KindOption,
        typer.Option("--kind", "-k", help="Type de contenu (movie ou tv)"),
    ] = KindOption.MOVIE,
    start: Annotated[
        int,
        typer.Option("--start", "-s", min=1, help="Premiere page d'index"),
    ] = 1,
    pages: Annotated[
        int,
        typer.Option("--pages", "-p", min=1, help="Nombre de pages a parcourir"),
    ] = 10,
) -> None:
    """Parcourt les pages d'index et enregistre les titres decouverts."""
    asyncio.run(_discover_async(kind.kind, start, pages))


@with_container(requires_db=False)
async def _discover_async(container, kind: TitleKind, start: int, pages: int) -> None:
    """Implementation async de la commande discover."""
    crawler = container.crawler_service()
    source = container.febbox_client()

    console.print(
        f"[bold cyan]Decouverte {kind.value}[/bold cyan]: pages {start} a {start + pages - 1}\n"
    )
    try:
        with stop_on_signals(crawler.stop):
            report = await crawler.discover(kind, range(start, start + pages))
    finally:
        await source.close()

    print_crawl_report(f"decouverte {kind.value}", report)


def crawl(
    kind: Annotated[
        KindOption,
        typer.Option("--kind", "-k", help="Type de contenu (movie ou tv)"),
    ] = KindOption.MOVIE,
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", min=1, help="Nombre maximum de titres a extraire"),
    ] = None,
    skip: Annotated[
        int,
        typer.Option("--skip", min=0, help="Nombre de titres de l'index a sauter"),
    ] = 0,
    reconcile: Annotated[
        bool,
        typer.Option("--reconcile/--no-reconcile", help="Reconcilier avec TMDB pendant la collecte"),
    ] = False,
) -> None:
    """Extrait les fichiers des titres decouverts (catalogue <kind>_index)."""
    asyncio.run(_crawl_async(kind.kind, limit, skip, reconcile))


@with_container()
async def _crawl_async(
    container, kind: TitleKind, limit: Optional[int], skip: int, reconcile: bool
) -> None:
    """Implementation async de la commande crawl."""
    config = container.config()
    store = container.checkpoint_store()

    stubs = store.load(f"{kind.value}_index")
    stubs = stubs[skip:] if limit is None else stubs[skip:skip + limit]
    if not stubs:
        console.print("[yellow]Aucun titre a extraire.[/yellow]")
        console.print(f"[dim]Lancer d'abord: mediacrawl discover --kind {kind.value}[/dim]")
        return

    reconciler = None
    if reconcile:
        if not config.tmdb_enabled:
            console.print("[red]Erreur:[/red] cle API TMDB non configuree (MEDIACRAWL_TMDB_API_KEY)")
            raise typer.Exit(code=1)
        reconciler = container.reconciler_service()

    crawler = container.crawler_service(reconciler=reconciler)
    source = container.febbox_client()

    console.print(f"[bold cyan]Extraction {kind.value}[/bold cyan]: {len(stubs)} titre(s)\n")
    try:
        with stop_on_signals(crawler.stop):
            report = await crawler.crawl(kind, stubs)
    finally:
        await source.close()
        if reconciler is not None:
            await container.tmdb_client().close()

    print_crawl_report(f"extraction {kind.value}", report)


def merge(
    family: Annotated[
        Optional[str],
        typer.Argument(help="Famille a fusionner (movie, tv, movie_index, tv_index). Toutes par defaut"),
    ] = None,
) -> None:
    """Fusionne les checkpoints restants dans le catalogue canonique."""
    families = CHECKPOINT_FAMILIES if family is None else (family,)
    for name in families:
        if name not in CHECKPOINT_FAMILIES:
            console.print(f"[red]Famille inconnue:[/red] {name}")
            raise typer.Exit(code=1)
    asyncio.run(_merge_async(families))


@with_container(requires_db=False)
async def _merge_async(container, families) -> None:
    """Implementation async de la commande merge."""
    store = container.checkpoint_store()
    loop = asyncio.get_running_loop()

    for family in families:
        pending = store.temporaries(family)
        if not pending:
            console.print(f"[dim]{family}: aucun checkpoint en attente[/dim]")
            continue
        result = await loop.run_in_executor(None, store.merge, family)
        if result.output is None:
            console.print(f"[red]{family}: fusion annulee (voir les logs)[/red]")
            continue
        console.print(
            f"[green]{family}[/green]: {result.total} titre(s), "
            f"{len(result.consumed)} checkpoint(s) consomme(s)"
        )
        if result.corrupt:
            console.print(f"  [red]{len(result.corrupt)} checkpoint(s) illisible(s)[/red]")
