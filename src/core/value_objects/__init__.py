"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- RawFile : Descripteur brut d'un fichier dans un listing de l'hebergeur
- ParsedEpisode : Saison/episode/qualite/codec extraits d'un nom de fichier
"""

from src.core.value_objects.parsed_info import ParsedEpisode, RawFile

__all__ = [
    "ParsedEpisode",
    "RawFile",
]
