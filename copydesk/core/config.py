"""Application configuration management."""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()


@dataclass
class Settings:
    """Application settings loaded from environment."""

    # App
    app_name: str = "Copydesk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Server
    allowed_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])

    # Task tracker (content persistence)
    tracker_api_url: Optional[str] = None
    tracker_api_token: Optional[str] = None
    tracker_timeout_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"  # json or text

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.log_format not in ("json", "text"):
            raise ValueError("LOG_FORMAT must be 'json' or 'text'")
        if self.tracker_api_url and not self.tracker_api_token:
            raise ValueError("TRACKER_API_TOKEN is required when TRACKER_API_URL is set")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def tracker_enabled(self) -> bool:
        return bool(self.tracker_api_url)


def load_settings_from_env() -> Settings:
    """Load settings from environment variables."""

    def get_bool(key: str, default: bool = False) -> bool:
        value = os.getenv(key, str(default)).lower()
        return value in ("true", "1", "yes")

    def get_float(key: str, default: float) -> float:
        return float(os.getenv(key, str(default)))

    def get_list(key: str, default: List[str]) -> List[str]:
        value = os.getenv(key)
        if value:
            return [item.strip() for item in value.split(",")]
        return default

    return Settings(
        # App
        app_name=os.getenv("APP_NAME", "Copydesk"),
        app_version=os.getenv("APP_VERSION", "0.1.0"),
        debug=get_bool("DEBUG", False),
        environment=os.getenv("ENVIRONMENT", "development"),

        # Server
        allowed_origins=get_list("ALLOWED_ORIGINS", ["http://localhost:3000"]),

        # Task tracker
        tracker_api_url=os.getenv("TRACKER_API_URL"),
        tracker_api_token=os.getenv("TRACKER_API_TOKEN"),
        tracker_timeout_seconds=get_float("TRACKER_TIMEOUT_SECONDS", 30.0),

        # Logging
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "text"),
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings_from_env()


def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    get_settings.cache_clear()
