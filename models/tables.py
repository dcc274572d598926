from typing import Sequence

from sqlalchemy import Column, Date, Integer, MetaData, String, Table

from models.base import ColumnType
from schemas.columns import ColumnSchemaEntry


# SQLAlchemy type per storage type, INCREMENTS is handled separately
COLUMN_TYPE_MAP = {
    ColumnType.INTEGER: Integer,
    ColumnType.DATE: Date,
    ColumnType.STRING: String,
}


def build_column(entry: ColumnSchemaEntry) -> Column:
    """Translate one schema entry into a SQLAlchemy column."""
    if entry.column_type == ColumnType.INCREMENTS:
        return Column(entry.name, Integer, primary_key=True, autoincrement=True)

    return Column(
        entry.name,
        COLUMN_TYPE_MAP[entry.column_type](),
        nullable=entry.nullable,
    )


def build_table(
    name: str,
    columns: Sequence[ColumnSchemaEntry],
    metadata: MetaData = None
) -> Table:
    """
    Build a Table for a record source.

    Tables are not declared up front since their columns come from the CSV
    header. A fresh MetaData is used unless one is supplied so that
    recreating a table in the same process never collides with a stale
    definition.
    """
    metadata = metadata if metadata is not None else MetaData()
    return Table(name, metadata, *(build_column(entry) for entry in columns))
