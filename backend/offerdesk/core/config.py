"""
Application configuration using pydantic-settings.

WHAT: Centralized config from environment variables
WHY: Type-safe, validated config with sensible defaults
HOW: Pydantic BaseSettings reads from .env and environment
"""

from pydantic_settings import BaseSettings
from pydantic import field_validator
from pathlib import Path


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App metadata
    APP_NAME: str = "Offer Desk"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Request Store (owns item requests and offers)
    REQUEST_STORE_BASE_URL: str = "http://localhost:4000"

    # Distance Service - empty means same host as the Request Store
    DISTANCE_SERVICE_BASE_URL: str = ""

    # Warehouse API request configuration
    WAREHOUSE_API_TIMEOUT: int = 10  # seconds
    WAREHOUSE_API_MAX_RETRIES: int = 3  # GET requests only
    WAREHOUSE_API_RETRY_DELAY: float = 0.5  # seconds, base for exponential backoff

    # Offer decisions
    TRANSIT_ROUTE: str = "/transit"
    RELOAD_AFTER_DECISION: bool = False  # full reload after a successful reject

    # Page views
    VIEW_IDLE_TIMEOUT_MINUTES: int = 30
    VIEW_CLEANUP_INTERVAL_SECONDS: int = 300

    # Streaming / SSE
    SSE_HEARTBEAT_INTERVAL: int = 15  # seconds between heartbeat events
    SSE_POLL_INTERVAL: float = 0.25  # seconds between view version checks

    # CORS - accepts comma-separated string or list
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:3001"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, list):
            return ",".join(v)
        return v

    @field_validator("REQUEST_STORE_BASE_URL", "DISTANCE_SERVICE_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Base URLs are joined with absolute paths."""
        return v.rstrip("/")

    def get_cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def get_distance_service_url(self) -> str:
        """Distance Service base URL, falling back to the Request Store."""
        return self.DISTANCE_SERVICE_BASE_URL or self.REQUEST_STORE_BASE_URL

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "./data/logs/offerdesk.log"

    class Config:
        # Project root .env first, then backend/.env
        env_file = [
            str(Path(__file__).parent.parent.parent.parent / ".env"),
            str(Path(__file__).parent.parent.parent / ".env"),
        ]
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Singleton instance
settings = Settings()
