"""
Order Query Service configuration
"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the order query service directory path
ORDER_QUERY_SERVICE_DIR = Path(__file__).parent.parent.parent
ENV_FILE = ORDER_QUERY_SERVICE_DIR / ".env"


class OrderQuerySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Order Query Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    ORDER_QUERY_DATABASE_URL: str = "sqlite+aiosqlite:///./order_query.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 40

    # Pagination
    DEFAULT_PAGE_LIMIT: int = 100
    MAX_PAGE_LIMIT: int = 1000

    # Insert the two sample members and their orders on startup
    SEED_SAMPLE_DATA: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_CREDENTIALS: bool = True
    CORS_METHODS: List[str] = ["GET"]
    CORS_HEADERS: List[str] = ["*"]


# Create a singleton instance
_settings_instance = None


def get_settings() -> OrderQuerySettings:
    """Get settings singleton instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = OrderQuerySettings()
    return _settings_instance
