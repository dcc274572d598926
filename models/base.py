import enum


# ============================================================================
# ENUMS
# ============================================================================

class ColumnType(str, enum.Enum):
    """Storage types a source column can be mapped to"""
    INCREMENTS = "increments"
    INTEGER = "integer"
    DATE = "date"
    STRING = "string"


class ETLStatus(str, enum.Enum):
    """Outcome of a per-file pipeline or a whole run"""
    SUCCESS = "success"
    PARTIAL = "partial_success"
    FAILED = "failed"
    SKIPPED = "skipped"
