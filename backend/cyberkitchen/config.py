"""
Cyber Kitchen Backend — Application Configuration
===================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.

Storage Layout:
    <STORAGE_ROOT>/
    └── recipes/
        ├── recipes.json      ← the whole recipe collection
        └── medias/           ← uploaded and imported images (media root)
            └── <folder>/img-1700000000000-123456789.jpg
"""

from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for running the server from the
    project directory. Attributes are grouped by concern.
    """

    # ── Storage ───────────────────────────────────────────────────────────
    # What: Base directory holding the `recipes/` data folder
    storage_root: str = Field(default=".")

    # What: Public URL prefix under which media files are addressed
    # Invariant: must match the static mount in main.py
    media_url_prefix: str = Field(default="/recipes/medias")

    # What: Maximum accepted upload size in bytes (default 50MB)
    max_upload_size: int = Field(default=52_428_800, ge=1_048_576, le=524_288_000)

    @property
    def recipes_file(self) -> Path:
        """Absolute path of the JSON document holding the recipe collection."""
        return Path(self.storage_root).resolve() / "recipes" / "recipes.json"

    @property
    def media_root(self) -> Path:
        """Absolute path of the media directory (security boundary for path ops)."""
        return Path(self.storage_root).resolve() / "recipes" / "medias"

    # ── Recipe Import ─────────────────────────────────────────────────────
    # What: Upper bound for each outbound fetch (page and image), in seconds
    import_timeout: float = Field(default=15.0, gt=0, le=120)

    # What: Browser-like identifying header sent with import requests
    # Some recipe sites reject requests without a browser user agent.
    import_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
        )
    )

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("media_url_prefix")
    @classmethod
    def normalize_media_url_prefix(cls, v: str) -> str:
        """Stores the prefix as `/a/b` (leading slash, no trailing slash)."""
        return "/" + v.strip("/")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance, imported throughout the application
settings = Settings()
