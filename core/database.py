"""
Database engine management with SQLAlchemy async
"""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def create_engine(database_url: str = None) -> AsyncEngine:
    """
    Create the async engine shared by every per-file pipeline.

    For SQLite URLs the parent directory of the database file is created
    first, the file itself is created by the driver on first connect.
    """
    database_url = database_url or settings.DATABASE_URL
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    logger.debug(f"Creating engine for {url.render_as_string(hide_password=True)}")

    return create_async_engine(
        database_url,
        echo=False,
        poolclass=NullPool,  # Each store operation opens its own connection
        future=True
    )
