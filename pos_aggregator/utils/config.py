"""
Configuration module with environment-based settings.
Supports: development, staging, production
"""
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache
from dotenv import load_dotenv
import os

# Load .env file
load_dotenv()


class BaseConfig(BaseSettings):
    """Base configuration shared across all environments."""

    # Application
    APP_NAME: str = "pos-aggregator"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Redis
    REDIS_URL: str | None = None
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_USERNAME: str | None = None
    REDIS_PASSWORD: str | None = None
    REDIS_CACHE_TTL: int = 3600

    # Credential exchange
    TOKEN_SERVICE_URL: str = "https://us-central1-pos-aggregator.cloudfunctions.net"

    # Square
    SQUARE_API_BASE_URL: str = "https://connect.squareup.com/v2"
    SQUARE_API_VERSION: str = "2024-10-17"

    # Clover
    CLOVER_API_BASE_URL: str = "https://api.clover.com"

    # HTTP
    POS_HTTP_TIMEOUT: float = 30.0

    # Caches (seconds)
    MENU_CACHE_TTL: int = 1800
    BUSINESS_HOURS_CACHE_TTL: int = 3600
    BUSINESS_HOURS_MAX_CONCURRENT: int = 5

    # Shops
    SHOPS_FILE: str = "shops.json"
    DEFAULT_TIMEZONE: str = "America/New_York"

    # Orders
    ORDER_STORE_KEY: str = "orders:history"
    ORDER_SYNC_INTERVAL_MINUTES: int = 2
    ORDER_SYNC_CONCURRENCY: int = 5
    ORDER_SYNC_ENABLED: bool = True

    # Cart
    CART_MAX_QUANTITY: int = 99
    CART_UNDO_HISTORY: int = 10

    # Security
    CORS_ORIGINS: List[str] = ["*"]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore"
    }


class DevelopmentConfig(BaseConfig):
    """Development environment configuration."""
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"

    # Sync less aggressively against sandbox merchants
    ORDER_SYNC_INTERVAL_MINUTES: int = 5


class ProductionConfig(BaseConfig):
    """Production environment configuration."""
    ENVIRONMENT: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"

    ORDER_SYNC_CONCURRENCY: int = 10

    # Stricter CORS in production
    CORS_ORIGINS: List[str] = []


class StagingConfig(BaseConfig):
    """Staging environment configuration."""
    ENVIRONMENT: str = "staging"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    SQUARE_API_BASE_URL: str = "https://connect.squareupsandbox.com/v2"
    CLOVER_API_BASE_URL: str = "https://sandbox.dev.clover.com"


@lru_cache()
def get_settings() -> BaseConfig:
    """
    Factory function that returns the appropriate config based on ENVIRONMENT.
    Uses lru_cache for singleton pattern.
    """
    env = os.getenv("ENVIRONMENT", "development").lower()

    config_map = {
        "development": DevelopmentConfig,
        "dev": DevelopmentConfig,
        "staging": StagingConfig,
        "stage": StagingConfig,
        "production": ProductionConfig,
        "prod": ProductionConfig,
    }

    config_class = config_map.get(env, DevelopmentConfig)
    return config_class()


# Default settings instance
settings = get_settings()
