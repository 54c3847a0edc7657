"""Application configuration read from environment variables.

Values are resolved once at import time. Override them by exporting the
matching environment variable (or putting it in `.env`) before starting
the app.
"""

import os
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Nutrition Needs API"
    app_version: str = "1.0.0"
    log_dir: str = os.path.join(os.path.dirname(__file__), "..", "logs")
    log_level: str = "INFO"
    cors_origins: str = "*"
    # Reject unknown macro preset names instead of falling back to balanced
    nutrition_strict_presets: bool = False
    ratio_tolerance: float = 0.01

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def parse_origins(raw: str) -> List[str]:
    """Split a comma-separated origin list, dropping blanks."""
    return [item.strip() for item in raw.split(",") if item.strip()]


settings = Settings()

APP_TITLE = settings.app_title
APP_VERSION = settings.app_version

LOG_DIR = settings.log_dir
LOG_LEVEL = settings.log_level.upper()

CORS_ORIGINS = parse_origins(settings.cors_origins)

STRICT_MACRO_PRESETS = settings.nutrition_strict_presets
RATIO_TOLERANCE = settings.ratio_tolerance
