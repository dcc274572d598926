"""
Streaming ETL components for loading an archive of CSV files into SQL.

This package contains every stage between the remote archive and the tables:

Modules:
    pipeline: End-to-end download, extract and load of one archive
    runner: Directory orchestrator, one concurrent pipeline per CSV file

Subpackages:
    extractors: Archive download, gzip/tar extraction, CSV record sources
    transformers: Schema derivation and record coercion
    loaders: Relational store and backpressure-aware batch loader

Architecture:
    Each CSV file flows through its own pipeline:

    1. Parse - Read the header, then stream records chunk by chunk
    2. Derive - Map the header to typed columns with a per-table lookup
    3. Load - Coerce records and insert them in fixed-size batches

    The loader only asks for the next record once the pending batch has
    been inserted, which keeps memory bounded by the batch size however
    large the file is. Files are independent: a failing file is reported
    and its siblings still load.

Usage:
    from ingestion.pipeline import DataDumpPipeline
    from ingestion.runner import ETLRunner
    from ingestion.loaders.sql_store import SQLStore

Example:
    # Load an already extracted directory
    runner = ETLRunner(SQLStore(database_url="sqlite+aiosqlite:///out/db.sqlite"))
    summary = await runner.run("tmp/dump")

    print(f"Loaded {summary['records_loaded']} records")

Error Handling:
    All components raise exceptions from core.exceptions carrying
    structured context. See DESIGN.md for the failure policy.
"""

__all__ = [
    "DataDumpPipeline",
    "ETLRunner",
    "ArchiveDownloader",
    "CSVRecordSource",
    "SchemaDeriver",
    "RecordCoercer",
    "BatchLoader",
    "SQLStore",
]
