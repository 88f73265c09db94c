"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Application Settings
    ENVIRONMENT: str = "development"  # "production" selects the embedded Chromium
    LOG_LEVEL: str = "INFO"
    PORT: int = 3002

    # Rendering engine
    CHROMIUM_EXECUTABLE_PATH: Optional[str] = None
    CHROMIUM_CHANNEL: Optional[str] = None

    # Document template
    MATHJAX_URL: str = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-svg.js"
    DEFAULT_LOGO_URL: str = "https://acadza-check-new.s3.amazonaws.com/P2BIkQ0QMacadzalogolarge.svg"
    INSTITUTION_NAME: str = "Chanakya DOST"
    REPORT_TIMEZONE: str = "UTC"

    # Timeouts (seconds)
    NAVIGATION_TIMEOUT: float = 30.0
    TYPESET_TIMEOUT: float = 30.0
    TYPESET_POLL_INTERVAL: float = 0.1
    RENDER_TIMEOUT: float = 90.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
