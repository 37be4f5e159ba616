"""
Service de reconciliation des titres avec TMDB.

ReconcilerService fait correspondre un titre decouvert localement a ses
metadonnees canoniques puis fusionne les champs descriptifs, sans jamais
toucher aux fichiers ni aux liens.

Etats : UNMATCHED -> SEARCHING -> {MATCHED | NO_MATCH}. Un titre portant
deja un ID TMDB passe directement par les details (MATCHED si succes,
sinon retour a la recherche). Le passage en SEARCHING est signale par le
callback on_state de reconcile().
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from functools import partial
from typing import Awaitable, Callable, Optional

from loguru import logger

from src.core.entities.catalog import (
    AnyTitle,
    MovieTitle,
    SeriesTitle,
    TitleKind,
)
from src.core.errors import FetchError
from src.core.ports.api_clients import IMetadataProvider, MetadataDetails
from src.core.ports.repositories import ITitleRepository
from src.services.matcher import MatcherService, extract_year, split_title_year
from src.utils.constants import (
    MAX_CAST_MEMBERS,
    MOVIE_CREW_JOBS,
    SERIES_CREW_JOBS,
    VIDEO_SITE,
    VIDEO_TYPES,
)


class MatchState(Enum):
    """Etat de reconciliation d'un titre."""

    UNMATCHED = "unmatched"
    SEARCHING = "searching"
    MATCHED = "matched"
    NO_MATCH = "no_match"


@dataclass
class SyncReport:
    """Bilan d'une resynchronisation.

    Attributes:
        matched: Titres enrichis et persistes
        no_match: Titres sans candidat acceptable
        failed: Titres en erreur (API ou persistance)
        skipped: Titres non traites (arret demande)
    """

    matched: int = 0
    no_match: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.matched + self.no_match + self.failed + self.skipped


def build_query(title: AnyTitle) -> tuple[str, Optional[int]]:
    """
    Texte de recherche et annee d'un titre.

    L'annee vient de la parenthese (AAAA) du titre, sinon du premier nom
    de fichier.
    """
    query, year = split_title_year(title.title)
    if year is None:
        file_names = title.file_names()
        if file_names:
            found = extract_year(file_names[0])
            year = int(found) if found else None
    return query, year


def apply_details(title: AnyTitle, details: MetadataDetails) -> None:
    """
    Fusionne les metadonnees TMDB dans le titre (hors saisons).

    Cast limite au top 10, crew filtre par poste, videos limitees aux
    bandes-annonces YouTube. Fichiers et liens ne sont jamais modifies.
    """
    title.external_id = details.id
    if details.overview:
        title.description = details.overview
    title.poster_path = details.poster_path
    title.backdrop_path = details.backdrop_path
    title.vote_average = details.vote_average
    title.vote_count = details.vote_count
    title.popularity = details.popularity
    title.genres = list(details.genres)
    title.cast = list(details.cast[:MAX_CAST_MEMBERS])
    title.videos = [
        v for v in details.videos if v.site == VIDEO_SITE and v.type in VIDEO_TYPES
    ]

    if isinstance(title, MovieTitle):
        title.crew = [c for c in details.crew if c.job in MOVIE_CREW_JOBS]
        title.release_date = details.release_date
        title.runtime = details.runtime
        title.imdb_id = details.imdb_id
    else:
        title.crew = [c for c in details.crew if c.job in SERIES_CREW_JOBS]
        title.first_air_date = details.release_date
        title.last_air_date = details.last_air_date
        title.status = details.status
        title.networks = list(details.networks)
        title.number_of_seasons = details.number_of_seasons
        title.number_of_episodes = details.number_of_episodes

    title.last_updated = datetime.now(timezone.utc)


class ReconcilerService:
    """
    Orchestration recherche -> scoring -> details -> fusion.

    Example:
        reconciler = ReconcilerService(provider=tmdb, matcher=MatcherService())
        state = await reconciler.reconcile(title)
        report = await reconciler.reconcile_all(kind=TitleKind.MOVIE, limit=100)
    """

    def __init__(
        self,
        provider: IMetadataProvider,
        matcher: MatcherService,
        repository: Optional[ITitleRepository] = None,
        rate_limit: float = 0.2,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ) -> None:
        """
        Args:
            provider: Fournisseur de metadonnees (TMDB)
            matcher: Service de scoring
            repository: Stockage des titres (requis pour reconcile_all)
            rate_limit: Pause entre deux titres dans reconcile_all (s)
            sleep: Fonction d'attente injectable (tests)
        """
        self._provider = provider
        self._matcher = matcher
        self._repository = repository
        self._rate_limit = rate_limit
        self._sleep = sleep or asyncio.sleep
        self._stopped = False

    def stop(self) -> None:
        """Interrompt reconcile_all apres le titre en cours."""
        self._stopped = True

    async def reconcile(
        self,
        title: AnyTitle,
        on_state: Optional[Callable[[MatchState], None]] = None,
    ) -> MatchState:
        """
        Reconcilie un titre en place.

        Args:
            title: Titre a enrichir
            on_state: Appele avec SEARCHING au debut de la recherche par titre

        Returns:
            MATCHED si les metadonnees ont ete fusionnees, NO_MATCH sinon

        Raises:
            FetchError: Erreur du fournisseur pendant la recherche / les details
        """
        if title.external_id:
            try:
                details = await self._provider.get_details(title.external_id, title.kind)
            except FetchError as e:
                logger.warning(
                    f"Details TMDB {title.external_id} indisponibles pour "
                    f"'{title.title}': {e} - recherche par titre"
                )
                details = None
            if details is not None:
                await self._merge(title, details)
                return MatchState.MATCHED

        if on_state is not None:
            on_state(MatchState.SEARCHING)
        return await self._search_and_merge(title)

    async def _search_and_merge(self, title: AnyTitle) -> MatchState:
        query, year = build_query(title)
        if not query:
            logger.warning(f"Titre vide pour {title.local_id}, recherche impossible")
            return MatchState.NO_MATCH

        search_query = f"{query} {year}" if year else query
        logger.debug(f"Recherche TMDB ({title.kind.value}): {search_query}")
        results = await self._provider.search(search_query, title.kind)
        if not results and year:
            logger.debug(f"Aucun resultat avec l'annee, nouvel essai: {query}")
            results = await self._provider.search(query, title.kind)

        best = self._matcher.select_best(query, year, results)
        if best is None:
            logger.warning(
                f"Aucune correspondance pour '{title.title}' "
                f"({len(results)} resultat(s) sous le seuil)"
            )
            return MatchState.NO_MATCH

        logger.info(
            f"Correspondance '{title.title}' -> {best.result.title} "
            f"(TMDB {best.result.id}, score {best.total:.1f})"
        )
        details = await self._provider.get_details(best.result.id, title.kind)
        if details is None:
            logger.warning(f"Details TMDB {best.result.id} introuvables")
            return MatchState.NO_MATCH

        await self._merge(title, details)
        return MatchState.MATCHED

    async def _merge(self, title: AnyTitle, details: MetadataDetails) -> None:
        apply_details(title, details)
        if isinstance(title, SeriesTitle):
            await self._sync_seasons(title, details)

    async def _sync_seasons(self, series: SeriesTitle, details: MetadataDetails) -> None:
        """
        Enrichit les saisons et episodes existants localement.

        La saison 0 (specials) est ignoree ; aucune saison ni aucun episode
        n'est cree. Un echec sur une saison est journalise sans faire
        echouer le titre.
        """
        local_seasons = {s.season_number: s for s in series.seasons}
        for summary in details.seasons:
            if summary.season_number == 0:
                continue
            season = local_seasons.get(summary.season_number)
            if season is None:
                continue

            season.external_id = summary.id
            if summary.name:
                season.name = summary.name
            season.air_date = summary.air_date
            season.poster_path = summary.poster_path

            try:
                season_details = await self._provider.get_season_details(
                    details.id, summary.season_number
                )
            except FetchError as e:
                logger.warning(
                    f"Saison {summary.season_number} de '{series.title}' "
                    f"non enrichie: {e}"
                )
                continue
            if season_details is None:
                continue

            local_episodes = {e.episode_number: e for e in season.episodes}
            for remote in season_details.episodes:
                episode = local_episodes.get(remote.episode_number)
                if episode is None:
                    continue
                episode.external_id = remote.id
                if remote.name:
                    episode.name = remote.name
                episode.air_date = remote.air_date
                episode.still_path = remote.still_path
                episode.overview = remote.overview
                episode.vote_average = remote.vote_average
                episode.vote_count = remote.vote_count

    async def reconcile_all(
        self,
        kind: Optional[TitleKind] = None,
        limit: int = 1000,
        skip: int = 0,
        only_unmatched: bool = False,
        progress_callback: Optional[Callable[[AnyTitle, MatchState], None]] = None,
        state_callback: Optional[Callable[[AnyTitle, MatchState], None]] = None,
    ) -> SyncReport:
        """
        Reconcilie les titres persistes et enregistre chaque mise a jour.

        Args:
            kind: Filtre par type de contenu
            limit: Nombre maximum de titres
            skip: Nombre de titres a sauter
            only_unmatched: Ne traiter que les titres sans ID TMDB
            progress_callback: Appele apres chaque titre avec son etat final
            state_callback: Appele a chaque transition intermediaire (SEARCHING)

        Returns:
            SyncReport (matched / no_match / failed / skipped)
        """
        if self._repository is None:
            raise ValueError("reconcile_all requiert un repository")

        titles = self._repository.find(
            kind=kind,
            has_external_id=False if only_unmatched else None,
            sort="local_id",
            limit=limit,
            skip=skip,
        )
        report = SyncReport()
        logger.info(f"Resynchronisation de {len(titles)} titre(s)")

        for i, title in enumerate(titles):
            if self._stopped:
                report.skipped = len(titles) - i
                logger.warning(f"Arret demande : {report.skipped} titre(s) non traite(s)")
                break

            logger.info(f"Sync {i + 1}/{len(titles)}: {title.title}")
            try:
                on_state = partial(state_callback, title) if state_callback else None
                state = await self.reconcile(title, on_state=on_state)
                if state is MatchState.MATCHED:
                    self._repository.update_by_key(title)
                    report.matched += 1
                else:
                    report.no_match += 1
            except Exception as e:
                logger.error(f"Erreur de sync pour '{title.title}' ({title.local_id}): {e}")
                report.failed += 1
                state = MatchState.UNMATCHED

            if progress_callback is not None:
                progress_callback(title, state)

            if i < len(titles) - 1:
                await self._sleep(self._rate_limit)

        return report
