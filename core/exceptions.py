"""
Custom exceptions for the archive ETL pipeline with structured error context.

Every failure raised by the pipeline carries a context dictionary so the
orchestrator can report which file, table, row or batch was affected without
parsing error messages.

Exception Hierarchy:
    ETLException (base)
    ├── ExtractionError
    │   ├── DownloadError
    │   ├── ArchiveExtractionError
    │   └── CSVExtractionError
    │       └── EmptySourceError
    ├── TransformationError
    │   ├── SchemaValidationError
    │   └── CoercionError
    └── LoadError
        └── DatabaseError
            └── BatchInsertError
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class ETLException(Exception):
    """
    Base exception for all ETL-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (file, table, row, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/reporting."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Extraction Errors
# ============================================================================

class ExtractionError(ETLException):
    """Base exception for failures before any record reaches the store."""
    pass


class DownloadError(ExtractionError):
    """
    Exception raised when the archive cannot be fetched.

    Context should include:
        - url: The archive URL
        - destination: Local path the archive was being written to
        - status_code: HTTP status code (if applicable)
    """
    pass


class ArchiveExtractionError(ExtractionError):
    """
    Exception raised when decompressing or unpacking the archive fails.

    Context should include:
        - source_path: Path to the compressed archive
        - destination: Directory the archive was being unpacked into
    """
    pass


class CSVExtractionError(ExtractionError):
    """
    Exception raised when a CSV file cannot be read or parsed.

    Context should include:
        - file_path: Path to the CSV file
        - rows_read: Data rows read before the failure (if applicable)
    """
    pass


class EmptySourceError(CSVExtractionError):
    """Raised when a CSV file has no rows at all, so no header is available."""
    pass


# ============================================================================
# Transformation Errors
# ============================================================================

class TransformationError(ETLException):
    """Base exception for schema derivation and coercion failures."""
    pass


class SchemaValidationError(TransformationError):
    """
    Exception raised when a header cannot be turned into a table schema.

    Context should include:
        - table_name: Name of the target table
        - header: The offending header
    """
    pass


class CoercionError(TransformationError):
    """
    Exception raised when a raw field cannot be converted to its column type.

    Context should include:
        - column_name: Column whose value failed
        - column_type: Target storage type
        - value: The raw value
        - row_number: 1-based data row number in the source file
    """
    pass


# ============================================================================
# Load Errors
# ============================================================================

class LoadError(ETLException):
    """Base exception for data loading failures."""
    pass


class DatabaseError(LoadError):
    """
    Exception raised when store operations fail.

    Context should include:
        - operation: Type of operation (DROP, CREATE, INSERT)
        - table_name: Name of the table
    """
    pass


class BatchInsertError(DatabaseError):
    """
    Exception raised when a bulk insert of one batch fails.

    Context should include:
        - table_name: Name of the table
        - batch_index: 1-based index of the failed batch
        - batch_size: Number of rows in the failed batch
        - rows_inserted: Rows committed by earlier batches
    """
    pass
