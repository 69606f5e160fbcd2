"""Configuration settings loaded from .env file."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings, loaded from .env file or FOLIO_* variables.

    The library directory is where the process-wide ``library.json`` lives.
    It is passed explicitly to the stores rather than looked up globally.
    """

    # Storage
    library_dir: Path = Path("./data/library")

    # Book discovery
    scan_max_depth: int = 3
    scan_max_directories: int = 600

    # Library status rules
    advanced_chapter_threshold: int = 6

    # New books
    default_author: str = "Autor"

    # Logging
    log_dir: Path = Path("./data/logs")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "FOLIO_",
        "extra": "ignore",
    }

    @field_validator("scan_max_depth")
    @classmethod
    def validate_scan_depth(cls, v: int) -> int:
        if v < 0:
            raise ValueError("scan_max_depth must be >= 0")
        return v

    @field_validator("scan_max_directories", "advanced_chapter_threshold")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Value must be >= 1")
        return v

    @field_validator("default_author")
    @classmethod
    def validate_default_author(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("default_author must not be blank")
        return v


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
