"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe MEDIACRAWL_,
et peut optionnellement être fournie via un fichier .env.

La clé API TMDB est optionnelle : la commande sync échoue si elle n'est pas fournie.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.services.matcher import MatchWeights

# Trouver le fichier .env à la racine du projet (parent de src/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe MEDIACRAWL_.
    Exemple : MEDIACRAWL_MAX_CONCURRENCY=3

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIACRAWL_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Source de contenu
    index_base_url: str = Field(default="http://156.242.65.27")
    file_host_base_url: str = Field(default="https://www.febbox.com")
    proxy_url: str = Field(default="")
    febbox_cookie: str = Field(default="")
    user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )

    # Pool de workers
    max_concurrency: int = Field(default=5, ge=1)
    request_interval: float = Field(default=2.0, ge=0)
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=2.0, ge=0)
    http_timeout: float = Field(default=120.0, gt=0)
    enrichment_concurrency: int = Field(default=5, ge=1)

    # Checkpoints et persistance
    checkpoint_every: int = Field(default=5, ge=1)
    persistence_timeout: float = Field(default=10.0, gt=0)
    temp_dir: Path = Field(default=Path("~/.mediacrawl/tmp"))
    catalog_dir: Path = Field(default=Path("~/.mediacrawl/catalog"))
    cache_dir: Path = Field(default=Path("~/.mediacrawl/cache"))

    # Base de données
    database_url: str = Field(default="sqlite:///mediacrawl.db")

    # TMDB (OPTIONNEL - sync désactivé si non défini)
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_language: str = Field(default="en-US")
    sync_rate_limit: float = Field(default=0.2, ge=0)

    # Scoring de reconciliation
    match_threshold: float = Field(default=30.0, ge=0)
    weight_exact_title: float = Field(default=50.0, ge=0)
    weight_fuzzy_title: float = Field(default=40.0, ge=0)
    weight_year_exact: float = Field(default=30.0, ge=0)
    weight_year_close: float = Field(default=20.0, ge=0)
    weight_year_near: float = Field(default=10.0, ge=0)
    weight_popularity_cap: float = Field(default=20.0, ge=0)
    weight_rank_decay: float = Field(default=0.1, ge=0, le=1)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/mediacrawl.log"))
    failure_log_file: Path = Field(default=Path("logs/failures.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator(
        "temp_dir", "catalog_dir", "cache_dir", "log_file", "failure_log_file", mode="before"
    )
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return bool(self.tmdb_api_key)

    def match_weights(self) -> MatchWeights:
        """Poids de scoring de la reconciliation."""
        return MatchWeights(
            exact_title=self.weight_exact_title,
            fuzzy_title=self.weight_fuzzy_title,
            year_exact=self.weight_year_exact,
            year_close=self.weight_year_close,
            year_near=self.weight_year_near,
            popularity_cap=self.weight_popularity_cap,
            rank_decay=self.weight_rank_decay,
            threshold=self.match_threshold,
        )
