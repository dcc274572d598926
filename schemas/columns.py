"""
Pydantic schemas for derived table columns with validation
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from models.base import ColumnType


class ColumnSchemaEntry(BaseModel):
    """
    One column of a target table.

    Ensures:
    - Column name is non-empty
    - Storage type is one of the supported ColumnType values
    - Columns are non-nullable unless explicitly stated
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    column_type: ColumnType
    nullable: bool = False

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        """Reject names made of whitespace only"""
        if not v.strip():
            raise ValueError("Column name cannot be blank")
        return v

    @property
    def is_primary_key(self) -> bool:
        return self.column_type == ColumnType.INCREMENTS
