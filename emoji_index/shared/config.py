# emoji_index/shared/config.py
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


def _user_dir(name: str) -> str:
    return str(Path.home() / ".emoji-index" / name)


class Settings(BaseSettings):
    """
    Runtime configuration.
    Every field can be overridden with an ``EMOJI_INDEX_<FIELD>`` environment
    variable or a ``.env`` file.
    """

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: LogFormat = LogFormat.CONSOLE

    # --- Storage ---
    CACHE_DIR: str = _user_dir("cache")
    USAGE_STORE_PATH: str = _user_dir("usage.json")
    PREFERENCES_PATH: str = _user_dir("preferences.json")

    # Directory with emoji-fallback[-<locale>].json files; None = bundled data.
    FALLBACK_DIR: Optional[str] = None
    # Explicit fallback file, tried before the per-locale files.
    FALLBACK_FILE: Optional[str] = None

    # --- Locale / sources ---
    DEFAULT_LOCALE: Optional[str] = None
    PREFER_APPLE: bool = True

    # --- HTTP ---
    HTTP_TIMEOUT: float = 30.0
    HTTP_RETRY_ATTEMPTS: int = 3

    # --- Search ---
    RANK_EMPTY_QUERY: bool = True

    # --- Usage tracking ---
    USAGE_TRACKING_ENABLED: bool = True
    USAGE_DECAY_FACTOR: float = 0.9
    USAGE_MIN_FAVORITES: int = 10
    USAGE_MAX_FAVORITES: int = 24
    USAGE_PRUNE_THRESHOLD: float = 0.01

    model_config = SettingsConfigDict(env_prefix="EMOJI_INDEX_", env_file=".env", extra="ignore")


settings = Settings()
