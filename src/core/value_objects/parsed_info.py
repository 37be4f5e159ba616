"""
Objets valeur pour les listings bruts de l'hebergeur et le parsing des noms.

RawFile est le descripteur plat renvoye par l'hebergeur avant regroupement ;
ParsedEpisode est l'information extraite d'un nom de fichier d'episode.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RawFile:
    """
    Descripteur brut d'un fichier dans un listing de partage.

    Attributs:
        file_id: Identifiant numerique du fichier (fid)
        file_name: Nom de fichier
        size: Taille affichee ("1.2 GB")
        size_bytes: Taille en octets si l'hebergeur la fournit
        thumb_url: Vignette
        folder: Nom du dossier de partage contenant le fichier
    """

    file_id: int
    file_name: str
    size: str = ""
    size_bytes: Optional[int] = None
    thumb_url: str = ""
    folder: str = ""


@dataclass(frozen=True)
class ParsedEpisode:
    """
    Informations extraites d'un nom de fichier d'episode.

    Attributs:
        season: Numero de saison
        episode: Numero d'episode
        quality: Tier de qualite ("1080p", "720p", "4K", "Standard")
        codec: Tag de codec servant de cle de Source ("H.264/x264", ...)
    """

    season: int
    episode: int
    quality: str = "Standard"
    codec: str = "Unknown"
