"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SEARCH_BACKENDS = ("places", "serpapi")


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    google_places_api_key: str
    serpapi_api_key: str = ""
    search_backend: str = "places"
    data_file: str = "data/tradies.json"
    html_file: str = "index.html"
    licence_register_file: str = ""
    profile_file: str = ""
    max_api_calls: int = 20
    page_size: int = 10
    search_delay: float = 0.5
    licence_delay: float = 2.0
    worker_port: int = 9000

    def search_api_key(self) -> str:
        """Return the credential for the configured search backend or raise ConfigError."""
        if self.search_backend == "serpapi":
            name, value = "SERPAPI_API_KEY", self.serpapi_api_key
        else:
            name, value = "GOOGLE_PLACES_API_KEY", self.google_places_api_key
        if not value:
            raise ConfigError(f"{name} must be set in the environment to run discovery.")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_places_api_key = os.getenv("GOOGLE_PLACES_API_KEY", "")
    serpapi_api_key = os.getenv("SERPAPI_API_KEY", "")
    search_backend = os.getenv("SEARCH_BACKEND", "places").strip().lower() or "places"
    if search_backend not in SEARCH_BACKENDS:
        raise ConfigError(f"SEARCH_BACKEND must be one of {', '.join(SEARCH_BACKENDS)}, got {search_backend!r}")

    if search_backend == "places" and not google_places_api_key:
        logger.warning("GOOGLE_PLACES_API_KEY is not configured; discovery runs will fail.")
    if search_backend == "serpapi" and not serpapi_api_key:
        logger.warning("SERPAPI_API_KEY is not configured; discovery runs will fail.")

    licence_register_file = os.getenv("LICENCE_REGISTER_FILE", "")
    if not licence_register_file:
        logger.warning("LICENCE_REGISTER_FILE is not configured; licence verification will fail.")

    return Settings(
        google_places_api_key=google_places_api_key,
        serpapi_api_key=serpapi_api_key,
        search_backend=search_backend,
        data_file=os.getenv("TRADIES_DATA_FILE", "data/tradies.json"),
        html_file=os.getenv("TRADIES_HTML_FILE", "index.html"),
        licence_register_file=licence_register_file,
        profile_file=os.getenv("DISCOVERY_PROFILE_FILE", ""),
        max_api_calls=int(os.getenv("MAX_API_CALLS", "20")),
        page_size=int(os.getenv("SEARCH_PAGE_SIZE", "10")),
        search_delay=float(os.getenv("SEARCH_DELAY_SECONDS", "0.5")),
        licence_delay=float(os.getenv("LICENCE_DELAY_SECONDS", "2.0")),
        worker_port=int(os.getenv("WORKER_PORT", "9000")),
    )
