"""
Couche domaine (core).

Contient les entités métier, ports (interfaces abstraites), objets valeur et
la taxonomie d'erreurs. Cette couche n'a AUCUNE dépendance vers
l'infrastructure (adapters, frameworks, BDD).

Sous-packages :
- entities/ : Titres du catalogue (film / série) et leur hiérarchie
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- value_objects/ : Objets valeur immutables (RawFile, ParsedEpisode)
"""
