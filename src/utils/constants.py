"""
Constantes globales pour mediacrawl.

Ce module contient les constantes utilisees dans l'application:
- Familles d'artefacts de checkpoint
- Tags de codec et de qualite reconnus dans les noms de fichiers
- Unites de taille
- Filtres appliques aux metadonnees TMDB (crew, videos, cast)
"""

# Familles d'artefacts de checkpoint (un artefact canonique par famille)
FAMILY_MOVIE = "movie"
FAMILY_TV = "tv"
FAMILY_MOVIE_INDEX = "movie_index"
FAMILY_TV_INDEX = "tv_index"
CHECKPOINT_FAMILIES = (FAMILY_MOVIE, FAMILY_TV, FAMILY_MOVIE_INDEX, FAMILY_TV_INDEX)

# Tags de codec : (marqueurs dans le nom de fichier, libelle), par priorite
CODEC_TAGS = (
    (("x265", "HEVC"), "HEVC/x265"),
    (("x264", "h264"), "H.264/x264"),
    (("AV1",), "AV1"),
)
UNKNOWN_CODEC = "Unknown"

# Tags de qualite : (marqueurs, libelle), par priorite
QUALITY_TAGS = (
    (("1080p",), "1080p"),
    (("720p",), "720p"),
    (("2160p", "4K"), "4K"),
)
STANDARD_QUALITY = "Standard"

# Multiplicateurs vers megaoctets
SIZE_UNITS = {
    "B": 1 / (1024 * 1024),
    "KB": 1 / 1024,
    "MB": 1,
    "GB": 1024,
    "TB": 1024 * 1024,
}

# Metadonnees TMDB conservees lors de la reconciliation
MAX_CAST_MEMBERS = 10

MOVIE_CREW_JOBS = frozenset({"Director", "Writer", "Producer", "Screenplay"})
SERIES_CREW_JOBS = frozenset({"Creator", "Executive Producer", "Director"})

VIDEO_SITE = "YouTube"
VIDEO_TYPES = frozenset({"Trailer", "Teaser"})
