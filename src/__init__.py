"""
mediacrawl - Moteur de collecte et de reconciliation de catalogues media.

Ce package parcourt un site d'index de films et de series, extrait
l'arborescence des fichiers heberges (saisons, episodes, sources, liens),
l'enregistre par checkpoints fusionnes de facon idempotente, puis
reconcilie chaque titre avec les metadonnees TMDB.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, erreurs)
- services/ : Couche application (pool de workers, extraction, reconciliation)
- adapters/ : Couche infrastructure (CLI, clients API)
- infrastructure/ : Persistance (SQLite, checkpoints)
"""
