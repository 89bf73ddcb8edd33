import logging
from typing import List

from pydantic_settings import BaseSettings

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "LinkPreview"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # HTTP
    REQUEST_TIMEOUT: float = 15.0  # seconds, per request
    USER_AGENT: str = (
        "Mozilla/5.0 (compatible; LinkPreview/0.1; +https://github.com/linkpreview)"
    )
    HTTP2: bool = True
    MAX_REDIRECT_HOPS: int = 10

    # Extraction
    EXTRACTION_WORKERS: int = 4

    # Cache
    CACHE_ENABLED: bool = True
    CACHE_INVALIDATION_TIMEOUT: float = 300.0  # seconds an entry stays valid
    CACHE_CLEANUP_INTERVAL: float = 10.0  # seconds between sweeps

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2
    SENTRY_ENVIRONMENT: str = "development"

    # Logging
    LOG_FORMAT: str = "json"  # "json" for production, "text" for development
    LOG_LEVEL: str = "INFO"

    # Metrics
    METRICS_ENABLED: bool = True

    model_config = {"env_prefix": "LINKPREVIEW_", "env_file": ".env", "extra": "ignore"}

    def model_post_init(self, __context) -> None:
        if self.MAX_REDIRECT_HOPS < 1:
            _logger.warning(
                "MAX_REDIRECT_HOPS=%s is not usable, falling back to 1.",
                self.MAX_REDIRECT_HOPS,
            )
            object.__setattr__(self, "MAX_REDIRECT_HOPS", 1)


settings = Settings()
