"""
Service de collecte : decouverte des titres et extraction de leurs fichiers.

CrawlerService orchestre les deux phases de collecte au-dessus du pool de
workers :
- discover : pages d'index -> ebauches de titres (ID local, nom, description)
- crawl : ebauches -> arbre complet (saisons, episodes, sources, fichiers, liens)

Les titres construits sont accumules dans un tampon protege par un verrou,
ecrits en checkpoint toutes les checkpoint_every unites, puis fusionnes
dans l'artefact canonique a la finalisation (fin normale ou arret).
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from loguru import logger

from src.core.entities.catalog import AnyTitle, MovieTitle, SeriesTitle, TitleKind
from src.core.errors import SchemaError
from src.core.ports.content_source import IContentSource
from src.core.ports.repositories import ITitleRepository
from src.infrastructure.persistence.checkpoint import CheckpointStore, MergeResult
from src.services.extraction import build_seasons, enrich_files
from src.services.frontier import Frontier
from src.services.reconciler import MatchState, ReconcilerService
from src.services.worker_pool import PoolReport, WorkerPool
from src.utils.helpers import share_key_from_link


@dataclass
class CrawlReport:
    """Bilan d'une phase de collecte.

    Attributes:
        succeeded: Unites traitees avec succes (titre ou page nouvelle)
        failed: Unites abandonnees (erreur fatale ou retries epuises)
        skipped: Unites jamais admises (arret demande)
        duplicates: Unites deja vues (ID local, page ou lien de partage)
        no_match: Titres extraits restes sans correspondance TMDB (aucun
            candidat ou erreur de reconciliation), deja comptes dans succeeded
    """

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    duplicates: int = 0
    no_match: int = 0
    merge: Optional[MergeResult] = None

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + self.skipped + self.duplicates


class CrawlerService:
    """
    Collecte concurrente, limitee en debit et reprenable.

    Example:
        crawler = CrawlerService(source=febbox, pool=pool, checkpoints=store)
        report = await crawler.discover(TitleKind.MOVIE, range(1, 11))
        stubs = store.load("movie_index")
        report = await crawler.crawl(TitleKind.MOVIE, stubs)
    """

    def __init__(
        self,
        source: IContentSource,
        pool: WorkerPool,
        checkpoints: CheckpointStore,
        repository: Optional[ITitleRepository] = None,
        reconciler: Optional[ReconcilerService] = None,
        enrichment_concurrency: int = 5,
        checkpoint_every: int = 5,
        persistence_timeout: float = 10.0,
    ) -> None:
        """
        Args:
            source: Site d'index + hebergeur
            pool: Pool de workers (pacing, retry, arret)
            checkpoints: Stockage des artefacts de checkpoint
            repository: Stockage des titres complets (optionnel)
            reconciler: Reconciliation TMDB des titres en vol (optionnel)
            enrichment_concurrency: Enrichissements de fichiers simultanes par titre
            checkpoint_every: Nombre d'unites entre deux checkpoints
            persistence_timeout: Timeout d'une ecriture en base (s)
        """
        self._source = source
        self._pool = pool
        self._checkpoints = checkpoints
        self._repository = repository
        self._reconciler = reconciler
        self._enrichment_concurrency = enrichment_concurrency
        self._checkpoint_every = max(1, checkpoint_every)
        self._persistence_timeout = persistence_timeout

        self._frontier = Frontier()
        self._buffer: list[AnyTitle] = []
        self._lock = asyncio.Lock()
        self._completed = 0
        self._unmatched: set[tuple[str, str]] = set()

    def stop(self) -> None:
        """Arret gracieux : plus d'admission, les unites en vol se terminent."""
        self._pool.stop()
        if self._reconciler is not None:
            self._reconciler.stop()

    @property
    def frontier(self) -> Frontier:
        return self._frontier

    # ------------------------------------------------------------------
    # Tampon et checkpoints
    # ------------------------------------------------------------------

    async def _buffer_title(self, family: str, title: AnyTitle) -> None:
        async with self._lock:
            self._buffer.append(title)
            self._completed += 1
            due = self._completed % self._checkpoint_every == 0
        if due:
            await self.checkpoint(family)

    async def checkpoint(self, family: str) -> None:
        """Ecrit le tampon courant dans un artefact temporaire."""
        async with self._lock:
            snapshot = list(self._buffer)
            self._buffer.clear()
        if not snapshot:
            return

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._checkpoints.save, family, snapshot)
        except OSError as e:
            logger.error(f"Checkpoint {family} impossible, titres conserves en memoire: {e}")
            async with self._lock:
                self._buffer[:0] = snapshot

    async def finalize(self, family: str) -> Optional[MergeResult]:
        """Checkpoint du reste du tampon puis fusion dans l'artefact canonique."""
        await self.checkpoint(family)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, self._checkpoints.merge, family)
        except OSError as e:
            logger.error(f"Fusion {family} impossible: {e}")
            return None

    # ------------------------------------------------------------------
    # Decouverte (pages d'index)
    # ------------------------------------------------------------------

    async def discover(self, kind: TitleKind, pages: Iterable[int]) -> CrawlReport:
        """
        Parcourt les pages d'index et accumule les ebauches de titres.

        Returns:
            CrawlReport ; merge contient le bilan de fusion de <kind>_index
        """
        family = f"{kind.value}_index"
        report = CrawlReport()

        units = []
        for page in pages:
            if self._frontier.mark_if_absent(("page", kind.value, page)):
                units.append(page)
            else:
                report.duplicates += 1

        async def _on_page(page: int, titles: list[AnyTitle]) -> None:
            new = 0
            for title in titles:
                if self._frontier.mark_if_absent(("stub", kind.value, title.local_id)):
                    async with self._lock:
                        self._buffer.append(title)
                    new += 1
                else:
                    report.duplicates += 1
            logger.info(f"Page {page} ({kind.value}): {new} nouveau(x) titre(s)")
            async with self._lock:
                self._completed += 1
                due = self._completed % self._checkpoint_every == 0
            if due:
                await self.checkpoint(family)

        async def _fetch(page: int) -> list[AnyTitle]:
            return await self._source.fetch_index_page(kind, page)

        logger.info(f"Decouverte {kind.value}: {len(units)} page(s)")
        pool_report = await self._pool.run(units, _fetch, on_success=_on_page)
        self._fill_report(report, pool_report)
        report.merge = await self.finalize(family)
        return report

    # ------------------------------------------------------------------
    # Extraction (titres)
    # ------------------------------------------------------------------

    async def crawl(self, kind: TitleKind, titles: Iterable[AnyTitle]) -> CrawlReport:
        """
        Extrait l'arbre de fichiers de chaque titre.

        Les titres deja vus dans l'execution (meme ID local ou meme lien de
        partage) sont comptes comme doublons.
        """
        family = kind.value
        report = CrawlReport()

        stubs: dict[str, AnyTitle] = {}
        for title in titles:
            if self._frontier.mark_if_absent(("title", kind.value, title.local_id)):
                stubs[title.local_id] = title
            else:
                report.duplicates += 1

        async def _extract(local_id: str) -> Optional[AnyTitle]:
            return await self.extract_title(kind, stubs[local_id])

        shared: list[str] = []

        async def _on_title(local_id: str, title: Optional[AnyTitle]) -> None:
            if title is None:
                shared.append(local_id)
                return
            if (title.kind.value, title.local_id) in self._unmatched:
                report.no_match += 1
            await self._persist(title)
            await self._buffer_title(family, title)

        logger.info(f"Extraction {kind.value}: {len(stubs)} titre(s)")
        pool_report = await self._pool.run(list(stubs), _extract, on_success=_on_title)
        self._fill_report(report, pool_report)
        # Lien de partage deja traite : succes du pool mais doublon du catalogue
        report.succeeded -= len(shared)
        report.duplicates += len(shared)
        report.merge = await self.finalize(family)
        return report

    async def extract_title(self, kind: TitleKind, stub: AnyTitle) -> Optional[AnyTitle]:
        """
        Construit l'arbre complet d'un titre.

        Returns:
            Le titre complete, ou None si son lien de partage a deja ete traite

        Raises:
            FetchError: Erreur de la source (classee pour le pool)
        """
        share_link = await self._source.resolve_share_link(stub.local_id, kind)
        if ("share", share_link) in self._frontier:
            logger.info(f"Deja visite: {share_link}")
            return None

        nodes = await self._source.list_share_nodes(share_link)
        if kind is TitleKind.MOVIE:
            title = await self._extract_movie(stub, nodes)
        else:
            title = await self._extract_series(stub, share_link, nodes)

        if not self._frontier.mark_if_absent(("share", share_link)):
            return None

        if self._reconciler is not None:
            await self._reconcile(title)
        return title

    async def _extract_movie(self, stub: AnyTitle, nodes: list) -> MovieTitle:
        files = await enrich_files(
            nodes,
            self._source.get_file_info,
            self._source.get_qualities,
            concurrency=self._enrichment_concurrency,
            call=self._pool.call,
        )
        movie = stub if isinstance(stub, MovieTitle) else MovieTitle(
            local_id=stub.local_id, title=stub.title, description=stub.description
        )
        movie.files = files
        movie.size = sum(f.size_mb for f in files)
        logger.info(f"Film '{movie.title}': {len(files)} fichier(s), {movie.size} Mo")
        return movie

    async def _extract_series(self, stub: AnyTitle, share_link: str, nodes: list) -> SeriesTitle:
        share_key = share_key_from_link(share_link)
        raw_files = []
        for folder in nodes:
            listed = await self._source.list_folder_files(share_key, folder.file_id)
            raw_files.extend(replace(raw, folder=folder.file_name) for raw in listed)

        files = await enrich_files(
            raw_files,
            self._source.get_file_info,
            self._source.get_qualities,
            concurrency=self._enrichment_concurrency,
            call=self._pool.call,
        )
        folder_names = {raw.file_id: raw.folder for raw in raw_files}
        seasons = build_seasons(files, folder_names)
        if not seasons:
            raise SchemaError(f"No valid seasons found for TV series {stub.title}")

        series = stub if isinstance(stub, SeriesTitle) else SeriesTitle(
            local_id=stub.local_id, title=stub.title, description=stub.description
        )
        series.seasons = seasons
        series.size = sum(s.size for s in seasons)
        logger.info(
            f"Serie '{series.title}': {len(seasons)} saison(s), "
            f"{sum(len(s.episodes) for s in seasons)} episode(s)"
        )
        return series

    async def _reconcile(self, title: AnyTitle) -> None:
        try:
            state = await self._reconciler.reconcile(title)
        except Exception as e:
            logger.warning(f"Reconciliation de '{title.title}' echouee: {e}")
            state = MatchState.NO_MATCH
        key = (title.kind.value, title.local_id)
        if state is MatchState.NO_MATCH:
            logger.debug(f"'{title.title}' sans correspondance TMDB")
            self._unmatched.add(key)
        else:
            self._unmatched.discard(key)

    async def _persist(self, title: AnyTitle) -> None:
        """Insertion idempotente en base (executor + timeout court)."""
        if self._repository is None:
            return
        loop = asyncio.get_running_loop()
        try:
            inserted = await asyncio.wait_for(
                loop.run_in_executor(None, self._repository.insert_if_absent, title),
                timeout=self._persistence_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"Timeout de persistance pour {title.local_id}")
            return
        except Exception as e:
            logger.error(f"Persistance de {title.local_id} impossible: {e}")
            return
        if not inserted:
            logger.debug(f"Titre {title.local_id} deja en base")

    @staticmethod
    def _fill_report(report: CrawlReport, pool_report: PoolReport) -> None:
        report.succeeded += len(pool_report.succeeded)
        report.failed += pool_report.failed
        report.skipped += pool_report.skipped
