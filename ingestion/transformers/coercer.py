"""
Convert raw CSV strings into the types of their target columns
"""

from datetime import date
from typing import Any, Dict, Sequence
import pandas as pd
from core.exceptions import CoercionError
from models.base import ColumnType
from schemas.columns import ColumnSchemaEntry


class RecordCoercer:
    """
    Apply the date and integer coercions to raw records.

    Handles:
    - Date columns, ISO 8601 text parsed with pandas' date parser
    - Integer columns, surrounding whitespace allowed, nothing else
    - Empty values in typed columns, rejected since columns are non-nullable

    String columns pass through untouched, columns missing from a record are
    left missing.
    """

    def __init__(self, columns: Sequence[ColumnSchemaEntry]):
        self.typed_columns = {
            c.name: c.column_type
            for c in columns
            if c.column_type in (ColumnType.DATE, ColumnType.INTEGER)
        }

    def coerce(self, record: Dict[str, Any], row_number: int) -> Dict[str, Any]:
        """Return a copy of record with typed columns converted."""
        coerced = dict(record)

        for column, column_type in self.typed_columns.items():
            if column not in coerced:
                continue

            value = coerced[column]
            try:
                if column_type == ColumnType.DATE:
                    coerced[column] = self._parse_date(value)
                else:
                    coerced[column] = self._parse_int(value)
            except (TypeError, ValueError, OverflowError) as e:
                raise CoercionError(
                    f"Cannot convert {value!r} to {column_type.value}",
                    context={
                        "column_name": column,
                        "column_type": column_type.value,
                        "value": value,
                        "row_number": row_number,
                    },
                    original_exception=e
                )

        return coerced

    @staticmethod
    def _parse_date(value: Any) -> date:
        if isinstance(value, date):
            return value
        text = str(value).strip()
        if not text:
            raise ValueError("empty value for non-nullable date column")
        # Relative words such as "now" or "today" are not dates
        if not (text.isascii() and text[0].isdigit()):
            raise ValueError("value does not name a date")
        parsed = pd.to_datetime(text, format="ISO8601")
        if pd.isna(parsed):
            raise ValueError("value does not name a date")
        return parsed.date()

    @staticmethod
    def _parse_int(value: Any) -> int:
        if isinstance(value, int):
            return value
        text = str(value).strip()
        if not text:
            raise ValueError("empty value for non-nullable integer column")
        # int() would also take "1_000" and non-ASCII digits
        if not (text.isascii() and text.lstrip("+-").isdigit()):
            raise ValueError("value is not a base-10 integer")
        return int(text)
