"""
Derive a table schema from a CSV header using a per-table type lookup
"""

from typing import Dict, List, Mapping, Optional, Sequence, Union
from core.config import settings
from core.exceptions import SchemaValidationError
from models.base import ColumnType
from schemas.columns import ColumnSchemaEntry
import logging

logger = logging.getLogger(__name__)

ColumnTypes = Mapping[str, Mapping[str, Union[ColumnType, str]]]


class SchemaDeriver:
    """
    Map a header to column schema entries.

    Types are never inferred from the data: columns listed in column_types
    for the table get their pinned type and every other column is a string.
    Supporting a new dataset means adding entries to the lookup. The
    primary key is synthesized and always comes first.
    """

    def __init__(
        self,
        column_types: Optional[ColumnTypes] = None,
        primary_key: str = "id"
    ):
        source = settings.COLUMN_TYPES if column_types is None else column_types
        self.column_types: Dict[str, Dict[str, ColumnType]] = {
            table: {column: ColumnType(kind) for column, kind in columns.items()}
            for table, columns in source.items()
        }
        self.primary_key = primary_key

        for table, columns in self.column_types.items():
            if ColumnType.INCREMENTS in columns.values():
                raise ValueError(
                    f"Column types for {table!r} cannot pin a primary key, "
                    f"it is always synthesized as {primary_key!r}"
                )

    def column_type(self, table_name: str, column_name: str) -> ColumnType:
        return self.column_types.get(table_name, {}).get(column_name, ColumnType.STRING)

    def derive(self, table_name: str, header: Sequence[str]) -> List[ColumnSchemaEntry]:
        """
        Build the ordered column list for a table.

        Raises:
            SchemaValidationError: Empty header, blank column name, or a
                header that already contains the primary key column
        """
        if not header:
            raise SchemaValidationError(
                "Header has no columns",
                context={"table_name": table_name}
            )

        if self.primary_key in header:
            raise SchemaValidationError(
                f"Header contains the reserved primary key column {self.primary_key!r}",
                context={"table_name": table_name, "header": list(header)}
            )

        try:
            columns = [
                ColumnSchemaEntry(name=self.primary_key, column_type=ColumnType.INCREMENTS)
            ]
            columns.extend(
                ColumnSchemaEntry(name=name, column_type=self.column_type(table_name, name))
                for name in header
            )
        except ValueError as e:
            raise SchemaValidationError(
                "Invalid column in header",
                context={"table_name": table_name, "header": list(header)},
                original_exception=e
            )

        pinned = {c.name: c.column_type.value for c in columns[1:] if c.column_type != ColumnType.STRING}
        logger.debug(f"Derived schema for {table_name}: {len(columns)} columns, pinned={pinned}")
        return columns
