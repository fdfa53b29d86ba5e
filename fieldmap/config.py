"""Configuration management for the field mapping engine."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file in ops folder
env_path = Path(__file__).parent.parent / "ops" / ".env"
load_dotenv(dotenv_path=env_path)


class ScoringConfig(BaseSettings):
    """Weights used by the column classifier."""

    name_weight: float = Field(default=0.6, alias="SCORING_NAME_WEIGHT")
    alias_factor: float = Field(default=0.92, alias="SCORING_ALIAS_FACTOR")
    fuzzy_threshold: int = Field(default=85, alias="SCORING_FUZZY_THRESHOLD")
    fuzzy_factor: float = Field(default=0.85, alias="SCORING_FUZZY_FACTOR")
    keyword_weight: float = Field(default=0.15, alias="SCORING_KEYWORD_WEIGHT")
    keyword_cap: float = Field(default=0.3, alias="SCORING_KEYWORD_CAP")
    type_weight: float = Field(default=0.25, alias="SCORING_TYPE_WEIGHT")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    # Application settings
    app_name: str = Field(default="business-field-mapper", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Catalog
    catalog_path: Optional[Path] = Field(default=None, alias="CATALOG_PATH")
    """Optional YAML file replacing the packaged field catalog."""

    # Classification
    sample_size: int = Field(default=20, alias="SAMPLE_SIZE")
    acceptance_threshold: float = Field(default=0.5, alias="ACCEPTANCE_THRESHOLD")
    max_candidates: int = Field(default=5, alias="MAX_CANDIDATES")
    classification_workers: int = Field(default=1, alias="CLASSIFICATION_WORKERS")
    """Thread count for column classification. 1 classifies sequentially."""

    # Aggregation
    low_stock_threshold: float = Field(default=10, alias="LOW_STOCK_THRESHOLD")

    # Uploads
    max_upload_mb: float = Field(default=10, alias="MAX_UPLOAD_MB")

    # Session storage
    storage_type: str = Field(default="memory", alias="STORAGE_TYPE")
    max_sessions: int = Field(default=100, alias="MAX_SESSIONS")
    """Sessions kept before the least recently used one is evicted."""

    # CORS configuration
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"
        populate_by_name = True

    @property
    def max_upload_bytes(self) -> int:
        return int(self.max_upload_mb * 1024 * 1024)


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    return config


def reload_config() -> AppConfig:
    """Reload configuration from environment variables."""
    global config
    config = AppConfig()
    return config
