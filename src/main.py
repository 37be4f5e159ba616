"""
Point d'entrée CLI de mediacrawl.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from .adapters.cli.commands import crawl, discover, merge, sync
from .config import Settings
from .container import Container
from .logging_config import configure_logging

__version__ = "0.1.0"

app = typer.Typer(
    name="mediacrawl",
    help="Collecte et reconciliation de catalogues de films et de series",
)
container = Container()

# Etat global pour les options de verbosite
state = {"verbose": 0, "quiet": False}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """mediacrawl - Collecte, checkpoints et reconciliation TMDB."""
    settings = get_config()
    if quiet:
        state["quiet"] = True
        log_level = "ERROR"
    else:
        state["verbose"] = verbose
        log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(
        log_level=log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
        failure_file=settings.failure_log_file,
    )


# Commandes de collecte
app.command()(discover)
app.command()(crawl)
app.command()(merge)

# Reconciliation
app.command()(sync)


def get_config() -> Settings:
    """Récupère les paramètres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration mediacrawl")
    typer.echo(f"Site d'index : {config.index_base_url}")
    typer.echo(f"Hébergeur : {config.file_host_base_url}")
    typer.echo(f"Proxy : {config.proxy_url or 'aucun'}")
    typer.echo(
        f"Pool : {config.max_concurrency} worker(s), {config.request_interval}s entre requêtes, "
        f"{config.max_retries} tentative(s)"
    )
    typer.echo(f"Checkpoints : {config.temp_dir} (tous les {config.checkpoint_every})")
    typer.echo(f"Catalogue : {config.catalog_dir}")
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"API TMDB : {'activée' if config.tmdb_enabled else 'désactivée'}")
    typer.echo(f"Seuil de correspondance : {config.match_threshold}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"mediacrawl v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    logger.info("Démarrage de mediacrawl", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
