"""
Storage-side models for the archive ETL pipeline.

Target tables are not declared as ORM classes: each one is derived at run
time from the header of its CSV file. This package holds the enums shared by
the pipeline and the builder that turns column schema entries into
SQLAlchemy tables.

Models:
    base: Shared enums (ColumnType, ETLStatus)
    tables: Dynamic Table construction from ColumnSchemaEntry lists

Usage:
    from models.base import ColumnType, ETLStatus
    from models.tables import build_table

Example:
    table = build_table("customers", columns)
    async with engine.begin() as conn:
        await conn.execute(CreateTable(table))
"""

__all__ = [
    "ColumnType",
    "ETLStatus",
    "build_table",
]
