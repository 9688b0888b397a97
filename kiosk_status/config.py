"""
Configuration module for the Kiosk Status Service
Loads environment variables and provides settings
"""
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_ENV: str = "development"
    APP_DEBUG: bool = False
    # Empty disables the admin key check
    ADMIN_API_KEY: str = ""
    CORS_ORIGINS: List[str] = ["*"]

    # Overpass (OpenStreetMap) geodata provider
    OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
    OVERPASS_USER_AGENT: str = "KioskStatus/1.0"
    OVERPASS_TIMEOUT_SEC: float = 30.0
    OVERPASS_MAX_ATTEMPTS: int = 3

    # Kiosk metadata cache
    CACHE_TTL_SEC: int = 300
    CACHE_COORD_PRECISION: int = 3
    DEFAULT_SEARCH_RADIUS_M: int = 15000

    # Status aggregation
    REPORT_DECAY_HOURS: float = 24.0
    REPORT_DECAY_TAU_HOURS: float = 12.0

    # Device trust
    MIN_TRUST_SCORE: float = 0.3
    MAX_TRUST_SCORE: float = 1.0
    DEFAULT_TRUST_SCORE: float = 0.5
    TRUST_MIN_OUTCOMES: int = 3
    TRUST_ACCURACY_WEIGHT: float = 0.7

    # Admin
    ADMIN_REPORTS_LIMIT: int = 50

    class Config:
        env_file = ".env"
        extra = "allow"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
