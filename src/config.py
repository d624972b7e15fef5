"""Application configuration loaded from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "SheTrack"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | test | production

    # --- Storage ---
    data_dir: Path = Path.home() / ".shetrack"

    # --- Engine ---
    tracker_config_path: Path | None = None  # defaults to the bundled tracker_config.yaml

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "SHETRACK_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
