"""
Relational store for derived tables, backed by a SQLAlchemy async engine
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Sequence
from sqlalchemy import MetaData, Table, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.schema import CreateTable, DropTable
from core.config import settings
from core.database import create_engine
from core.exceptions import DatabaseError
from models.tables import build_table
from schemas.columns import ColumnSchemaEntry
import logging

logger = logging.getLogger(__name__)


class SQLStore:
    """
    Drop, create and bulk-insert into tables derived from CSV headers.

    One store (one engine) is shared by every concurrent per-file pipeline.
    SQLite allows a single writer at a time, so with serialize_writes
    enabled all DDL and inserts go through one asyncio lock instead of
    relying on the driver to retry on a locked database.

    No transaction spans more than one call: each drop, create and batch
    insert commits on its own.
    """

    def __init__(
        self,
        engine: Optional[AsyncEngine] = None,
        database_url: Optional[str] = None,
        serialize_writes: Optional[bool] = None
    ):
        self.engine = engine if engine is not None else create_engine(database_url)
        self.serialize_writes = (
            settings.SERIALIZE_WRITES if serialize_writes is None else serialize_writes
        )
        self._write_lock = asyncio.Lock()
        self._tables: Dict[str, Table] = {}
        self._disposed = False

    @property
    def disposed(self) -> bool:
        return self._disposed

    @asynccontextmanager
    async def _writing(self):
        if self.serialize_writes:
            async with self._write_lock:
                yield
        else:
            yield

    async def drop_table_if_exists(self, name: str) -> None:
        """Drop the table if it exists, a missing table is not an error."""
        try:
            async with self._writing():
                async with self.engine.begin() as conn:
                    await conn.execute(DropTable(Table(name, MetaData()), if_exists=True))
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to drop table",
                context={"operation": "DROP", "table_name": name},
                original_exception=e
            )

        self._tables.pop(name, None)
        logger.debug(f'Dropped table "{name}" if it existed')

    async def create_table(self, name: str, columns: Sequence[ColumnSchemaEntry]) -> Table:
        """Create the table from its column schema entries."""
        table = build_table(name, columns)

        try:
            async with self._writing():
                async with self.engine.begin() as conn:
                    await conn.execute(CreateTable(table))
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to create table",
                context={
                    "operation": "CREATE",
                    "table_name": name,
                    "columns": [c.name for c in columns],
                },
                original_exception=e
            )

        self._tables[name] = table
        logger.info(f'Creating table "{name}"')
        return table

    async def batch_insert(self, name: str, rows: Sequence[Dict[str, Any]]) -> int:
        """
        Insert rows into a table created by this store in one statement.

        Returns:
            Number of rows inserted
        """
        if not rows:
            return 0

        table = self._tables.get(name)
        if table is None:
            raise DatabaseError(
                "Table was not created by this store",
                context={"operation": "INSERT", "table_name": name}
            )

        rows = list(rows)
        try:
            async with self._writing():
                async with self.engine.begin() as conn:
                    await conn.execute(insert(table), rows)
        except SQLAlchemyError as e:
            raise DatabaseError(
                "Failed to insert rows",
                context={
                    "operation": "INSERT",
                    "table_name": name,
                    "rows": len(rows),
                },
                original_exception=e
            )

        return len(rows)

    async def dispose(self) -> None:
        """Release the engine. Safe to call more than once."""
        if self._disposed:
            return

        self._disposed = True
        await self.engine.dispose()
        logger.debug("Store connection released")

    async def __aenter__(self) -> "SQLStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.dispose()
