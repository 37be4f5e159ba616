"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la CLI : engine et
repository SQLModel, clients HTTP, services de collecte et de
reconciliation. Aucun etat au niveau module : tout est cree par le
container.
"""

from dependency_injector import containers, providers

from .adapters.api.cache import APICache
from .adapters.api.febbox_client import FebboxClient
from .adapters.api.tmdb_client import TMDBClient
from .config import Settings
from .infrastructure.persistence.checkpoint import CheckpointStore
from .infrastructure.persistence.database import create_db_engine, init_db
from .infrastructure.persistence.repositories import SQLModelTitleRepository
from .services.crawler import CrawlerService
from .services.matcher import MatcherService
from .services.reconciler import ReconcilerService
from .services.worker_pool import WorkerPool


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Cree les tables une fois
        crawler = container.crawler_service()
        repo = container.title_repository()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - engine unique, Resource pour la creation des tables
    engine = providers.Singleton(
        create_db_engine,
        database_url=config.provided.database_url,
    )
    database = providers.Resource(init_db, engine=engine)

    # Repository - ouvre une session par operation
    title_repository = providers.Singleton(
        SQLModelTitleRepository,
        engine=engine,
    )

    # Artefacts de checkpoint
    checkpoint_store = providers.Singleton(
        CheckpointStore,
        temp_dir=config.provided.temp_dir,
        catalog_dir=config.provided.catalog_dir,
    )

    # Cache API - Singleton pour partage entre clients
    api_cache = providers.Singleton(
        APICache,
        cache_dir=providers.Callable(str, config.provided.cache_dir),
    )

    # Clients externes
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        language=config.provided.tmdb_language,
        timeout=config.provided.http_timeout,
    )

    febbox_client = providers.Singleton(
        FebboxClient,
        index_base_url=config.provided.index_base_url,
        file_host_base_url=config.provided.file_host_base_url,
        proxy_url=config.provided.proxy_url,
        cookie=config.provided.febbox_cookie,
        user_agent=config.provided.user_agent,
        timeout=config.provided.http_timeout,
    )

    # Service de scoring (stateless - Singleton)
    matcher_service = providers.Singleton(
        MatcherService,
        weights=config.provided.match_weights.call(),
    )

    # Reconciliation - Factory : etat d'arret propre a chaque execution
    reconciler_service = providers.Factory(
        ReconcilerService,
        provider=tmdb_client,
        matcher=matcher_service,
        repository=title_repository,
        rate_limit=config.provided.sync_rate_limit,
    )

    # Pool de workers - Factory : un pool (et un arret) par execution
    worker_pool = providers.Factory(
        WorkerPool,
        max_concurrency=config.provided.max_concurrency,
        request_interval=config.provided.request_interval,
        max_retries=config.provided.max_retries,
        retry_delay=config.provided.retry_delay,
    )

    # Collecte - Factory : Frontier et tampon propres a chaque execution
    # Utiliser: container.crawler_service(reconciler=container.reconciler_service())
    crawler_service = providers.Factory(
        CrawlerService,
        source=febbox_client,
        pool=worker_pool,
        checkpoints=checkpoint_store,
        repository=title_repository,
        enrichment_concurrency=config.provided.enrichment_concurrency,
        checkpoint_every=config.provided.checkpoint_every,
        persistence_timeout=config.provided.persistence_timeout,
    )
