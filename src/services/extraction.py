"""
Extraction hierarchique et regroupement des listings de fichiers.

Transforme une liste plate de RawFile en arbre Season -> Episode -> Source
-> File pour une serie, ou en liste de File pour un film.

Regles:
- Episode : motifs S<s>E<e> puis .<s>x<e>. (par priorite). Les fichiers
  sans motif sont ignores.
- Source : regroupement par tag de codec (HEVC/x265, H.264/x264, AV1, Unknown)
- Tailles normalisees en Mo entiers puis sommees File -> Episode -> Season
- Ordre deterministe : saisons, episodes par numero ; sources par nom ;
  fichiers par ID

L'enrichissement par fichier (details + liens par qualite) est un fan-out
borne independant du pacing externe ; un echec donne un File minimal.
"""

import asyncio
import re
from collections import defaultdict
from typing import Awaitable, Callable, Optional

from loguru import logger

from src.core.entities.catalog import Episode, File, Link, Season, Source
from src.core.errors import ErrorKind
from src.core.value_objects import ParsedEpisode, RawFile
from src.utils.constants import (
    CODEC_TAGS,
    QUALITY_TAGS,
    STANDARD_QUALITY,
    UNKNOWN_CODEC,
)
from src.utils.helpers import md5_id, parse_size_mb

# Motifs d'episode par ordre de priorite
EPISODE_PATTERNS = (
    re.compile(r"[Ss](\d+)[Ee](\d+)"),  # S03E05, s03e05
    re.compile(r"\.(\d+)x(\d+)\."),  # .3x05.
)


def detect_codec(filename: str) -> str:
    """Tag de codec d'un nom de fichier ("Unknown" si aucun marqueur)."""
    for markers, label in CODEC_TAGS:
        if any(marker in filename for marker in markers):
            return label
    return UNKNOWN_CODEC


def detect_quality(filename: str) -> str:
    """Tag de qualite d'un nom de fichier ("Standard" si aucun marqueur)."""
    for markers, label in QUALITY_TAGS:
        if any(marker in filename for marker in markers):
            return label
    return STANDARD_QUALITY


def extract_episode_info(filename: str) -> Optional[ParsedEpisode]:
    """
    Extrait saison, episode, qualite et codec d'un nom de fichier.

    Returns:
        ParsedEpisode, ou None si aucun motif d'episode ne correspond

    Example:
        extract_episode_info("Show.S01E02.1080p.x264.mp4")
        -> ParsedEpisode(season=1, episode=2, quality="1080p", codec="H.264/x264")
    """
    for pattern in EPISODE_PATTERNS:
        match = pattern.search(filename)
        if match:
            return ParsedEpisode(
                season=int(match.group(1)),
                episode=int(match.group(2)),
                quality=detect_quality(filename),
                codec=detect_codec(filename),
            )
    return None


def raw_to_file(raw: RawFile) -> File:
    """File minimal (sans liens) depuis un descripteur brut."""
    return File(
        file_id=raw.file_id,
        file_name=raw.file_name,
        size=raw.size,
        size_mb=parse_size_mb(raw.size, raw.size_bytes),
        thumb_url=raw.thumb_url,
    )


def build_sources(files: list[File]) -> list[Source]:
    """Regroupe les fichiers d'un episode par codec, sources triees par nom."""
    by_codec: dict[str, list[File]] = defaultdict(list)
    for f in files:
        by_codec[detect_codec(f.file_name)].append(f)

    return [
        Source(
            source_id=md5_id(codec),
            source_name=codec,
            files=sorted(by_codec[codec], key=lambda f: f.file_id),
        )
        for codec in sorted(by_codec)
    ]


def group_episodes(files: list[File]) -> dict[int, list[Episode]]:
    """
    Regroupe des fichiers d'episodes par (saison, episode).

    Returns:
        Episodes tries par numero, indexes par numero de saison
    """
    grouped: dict[tuple[int, int], list[File]] = defaultdict(list)
    for f in files:
        info = extract_episode_info(f.file_name)
        if info is None:
            logger.debug(f"Fichier ignore (aucun motif d'episode): {f.file_name}")
            continue
        grouped[(info.season, info.episode)].append(f)

    seasons: dict[int, list[Episode]] = defaultdict(list)
    for season_number, episode_number in sorted(grouped):
        episode_files = grouped[(season_number, episode_number)]
        seasons[season_number].append(
            Episode(
                episode_id=md5_id(f"S{season_number}E{episode_number}"),
                episode_number=episode_number,
                name=f"Episode {episode_number}",
                size=sum(f.size_mb for f in episode_files),
                sources=build_sources(episode_files),
            )
        )
    return dict(seasons)


def build_seasons(
    files: list[File],
    folder_names: Optional[dict[int, str]] = None,
) -> list[Season]:
    """
    Construit les saisons d'une serie depuis ses fichiers.

    Args:
        files: Fichiers (enrichis ou minimaux) de toutes les saisons
        folder_names: Nom du dossier de l'hebergeur par file_id

    Returns:
        Saisons triees par numero, tailles agregees
    """
    folder_names = folder_names or {}
    seasons = []
    for season_number, episodes in sorted(group_episodes(files).items()):
        season_file_ids = [
            f.file_id for ep in episodes for src in ep.sources for f in src.files
        ]
        name = next(
            (folder_names[fid] for fid in season_file_ids if folder_names.get(fid)),
            f"Season {season_number}",
        )
        seasons.append(
            Season(
                season_id=md5_id(f"S{season_number}"),
                season_number=season_number,
                name=name,
                size=sum(ep.size for ep in episodes),
                episodes=episodes,
            )
        )
    return seasons


FileInfoFunc = Callable[[int], Awaitable[File]]
QualitiesFunc = Callable[[int], Awaitable[list[Link]]]
RetryFunc = Callable[..., Awaitable]


async def enrich_files(
    raw_files: list[RawFile],
    get_file_info: FileInfoFunc,
    get_qualities: QualitiesFunc,
    concurrency: int = 5,
    call: Optional[RetryFunc] = None,
) -> list[File]:
    """
    Enrichit chaque fichier (details + liens) avec un fan-out borne.

    Args:
        raw_files: Descripteurs bruts
        get_file_info: Coroutine de details d'un fichier
        get_qualities: Coroutine de liens par qualite
        concurrency: Nombre maximum d'enrichissements simultanes
        call: Wrapper de retry (ex: WorkerPool.call) ; appel direct si None

    Returns:
        Fichiers tries par ID. Un echec d'enrichissement (PARTIAL_FAILURE)
        produit un File minimal sans liens.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))
    lock = asyncio.Lock()
    results: list[File] = []

    async def _invoke(func, *args):
        if call is None:
            return await func(*args)
        return await call(func, *args)

    async def _enrich(raw: RawFile) -> None:
        async with semaphore:
            try:
                detailed = await _invoke(get_file_info, raw.file_id)
                detailed.links = await _invoke(get_qualities, raw.file_id)
                if not detailed.file_name:
                    detailed.file_name = raw.file_name
                if raw.size_bytes:
                    detailed.size_mb = parse_size_mb(detailed.size, raw.size_bytes)
            except Exception as e:
                logger.warning(
                    f"{ErrorKind.PARTIAL_FAILURE.value}: infos de repli pour "
                    f"{raw.file_name} (fid: {raw.file_id}): {e}"
                )
                detailed = raw_to_file(raw)
        async with lock:
            results.append(detailed)

    await asyncio.gather(*(_enrich(raw) for raw in raw_files))
    return sorted(results, key=lambda f: f.file_id)
