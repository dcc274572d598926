"""
Pydantic schemas for data validation.

Schemas:
    columns: Column schema entries derived from CSV headers

Usage:
    from schemas.columns import ColumnSchemaEntry

Example:
    entry = ColumnSchemaEntry(name="Index", column_type=ColumnType.INTEGER)

    # Pydantic validates the name and the storage type
    assert entry.nullable is False
"""

__all__ = [
    "ColumnSchemaEntry",
]
