# core/config.py
"""
Application settings.

Every tunable value lives here and can be overridden through environment
variables (or a local ``.env`` file).  The rest of the code base reads them
through ``get_settings()`` or the module-level ``settings`` instance.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Application / server
    # ------------------------------------------------------------------
    PROJECT_NAME: str = "Page Translator"
    VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    DEBUG: bool = False
    WORKERS: int = 1
    LOG_LEVEL: str = "INFO"
    ALLOWED_HOSTS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # ------------------------------------------------------------------
    # Page fetching
    # ------------------------------------------------------------------
    DEFAULT_USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0 Safari/537.36"
    )
    ACCEPT_LANGUAGE: str = "en-US,en;q=0.9,ru;q=0.8"
    FETCH_TIMEOUT: float = 35.0
    FETCH_MAX_BYTES: int = 7 * 1024 * 1024
    IMAGE_TIMEOUT: float = 20.0
    IMAGE_MAX_BYTES: int = 4 * 1024 * 1024

    # ------------------------------------------------------------------
    # Translation providers
    # ------------------------------------------------------------------
    SOURCE_LANG: str = "en"
    TARGET_LANG: str = "ru"
    MYMEMORY_URL: str = "https://api.mymemory.translated.net"
    MYMEMORY_EMAIL: Optional[str] = None
    MYMEMORY_MAX_QUERY_CHARS: int = 480
    LIBRETRANSLATE_URL: Optional[str] = None
    LIBRETRANSLATE_API_KEY: Optional[str] = None
    PROVIDER_TIMEOUT: float = 15.0
    PROVIDER_ATTEMPTS: int = 3
    PROVIDER_RETRY_DELAYS: List[float] = Field(default_factory=lambda: [0.3, 0.8, 1.5])
    PROVIDER_RETRY_JITTER: float = 0.25

    # ------------------------------------------------------------------
    # Translation pipeline
    # ------------------------------------------------------------------
    TRANSLATION_CACHE_SIZE: int = 3000
    TRANSLATION_CONCURRENCY: int = 2
    TRANSLATION_MIN_INTERVAL: float = 0.16
    BATCH_MAX_CHARS: int = 1700
    LONG_TEXT_CHUNK: int = 480
    MAX_SEGMENTS: int = 170
    MIN_SEGMENT_CHARS: int = 3
    TRANSLATE_BUDGET_SECONDS: float = 12.0
    TRANSLATE_SKIP_INTERACTIVE: bool = False

    # ------------------------------------------------------------------
    # Content extraction
    # ------------------------------------------------------------------
    EXTRACT_MIN_HTML: int = 64
    EXTRACT_MAX_ELEMENTS: int = 650
    EXTRACT_MAX_CHARS: int = 150_000
    EXTRACT_WIKI_MAX_ELEMENTS: int = 260
    EXTRACT_WIKI_MAX_CHARS: int = 40_000

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------
    WEATHER_URL: str = "https://wttr.in"
    WEATHER_TIMEOUT: float = 15.0
    WEATHER_DEFAULT_CITY: str = "Moscow"
    WEATHER_FORECAST_DAYS: int = 3


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
