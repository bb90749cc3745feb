"""Process-level CycleSense settings, read from the environment."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Environment variables (or a .env file) override these defaults.

    Engine thresholds are not settings; they live in analysis_config.yaml.
    """

    # --- App ---
    app_name: str = "CycleSense"
    app_version: str = "0.1.0"
    debug: bool = False  # forces DEBUG logging in the CLI
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Analysis engine ---
    analysis_config_path: Path | None = None  # overrides the bundled analysis_config.yaml

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
