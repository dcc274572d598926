"""
Core utilities and configuration for the archive ETL system.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Async engine creation for the relational store
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import create_engine
    from core.exceptions import CSVExtractionError, BatchInsertError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Create the shared engine
    engine = create_engine(settings.DATABASE_URL)
"""

__all__ = [
    "settings",
    "create_engine",
    "setup_logging",
    # Exceptions
    "ETLException",
    "ExtractionError",
    "DownloadError",
    "ArchiveExtractionError",
    "CSVExtractionError",
    "EmptySourceError",
    "TransformationError",
    "SchemaValidationError",
    "CoercionError",
    "LoadError",
    "DatabaseError",
    "BatchInsertError",
]
