"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Dict, Optional


DEFAULT_COLUMN_TYPES: Dict[str, Dict[str, str]] = {
    "customers": {
        "Index": "integer",
        "Subscription Date": "date",
    },
    "organizations": {
        "Index": "integer",
        "Number of Employees": "integer",
    },
}


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///out/database.sqlite"
    SERIALIZE_WRITES: bool = True

    # Source archive
    DUMP_DOWNLOAD_URL: Optional[str] = None
    ARCHIVE_NAME: str = "dump.tar.gz"
    DOWNLOAD_TIMEOUT: float = 60.0

    # Working directories
    WORK_DIR: str = "tmp"
    OUTPUT_DIR: str = "out"

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ETL Configuration
    ETL_BATCH_SIZE: int = 100
    SOURCE_EXTENSION: str = ".csv"

    # Pinned column types per table, everything else is stored as a string.
    # Override with a JSON object in the environment.
    COLUMN_TYPES: Dict[str, Dict[str, str]] = DEFAULT_COLUMN_TYPES


settings = Settings()
