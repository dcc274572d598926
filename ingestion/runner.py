# ============================================================================
# File: ingestion/runner.py
# Description: Per-directory orchestrator running one pipeline per CSV file
# ============================================================================
"""
ETL Runner - Orchestrates the per-file Parse, Derive, Load pipelines.

This module provides directory-level orchestration with:
- One independent pipeline per CSV file, run concurrently
- File-scoped failures (a failing file never aborts its siblings)
- Detailed error context and logging
- Release of the shared store exactly once on every exit path
"""

import asyncio
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union
import logging

from core.config import settings
from core.exceptions import ETLException, ExtractionError
from ingestion.extractors.csv_extractor import CSVRecordSource
from ingestion.extractors.files import list_source_files
from ingestion.loaders.batch_loader import BatchLoader
from ingestion.loaders.sql_store import SQLStore
from ingestion.transformers.schema_deriver import SchemaDeriver
from models.base import ETLStatus

logger = logging.getLogger(__name__)


class ETLRunner:
    """
    Directory-level orchestrator

    Responsibilities:
    - Discover record sources in a directory
    - For each source: read header, drop table, derive schema, create
      table, batch-load rows
    - Aggregate per-source outcomes into one run summary
    - Dispose of the store when the run ends, whatever the outcome

    Tables loaded by sources that succeeded are kept when a sibling fails,
    nothing is rolled back across files.
    """

    def __init__(
        self,
        store: SQLStore,
        schema_deriver: Optional[SchemaDeriver] = None,
        batch_size: Optional[int] = None,
        extension: Optional[str] = None
    ):
        self.store = store
        self.schema_deriver = schema_deriver or SchemaDeriver()
        self.batch_size = batch_size or settings.ETL_BATCH_SIZE
        self.extension = extension or settings.SOURCE_EXTENSION

    async def run_source(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Run the full pipeline for one CSV file.

        Returns:
            Dictionary with status, table_name, file_path, columns,
            records_loaded and batches

        Raises:
            ETLException: Any failure, with table_name and file_path in context
        """
        source = CSVRecordSource(file_path, chunk_size=self.batch_size)
        table_name = source.table_name

        try:
            header = await source.read_header()
            await self.store.drop_table_if_exists(table_name)
            columns = self.schema_deriver.derive(table_name, header)
            await self.store.create_table(table_name, columns)

            loader = BatchLoader(
                self.store,
                table_name,
                columns,
                batch_size=self.batch_size
            )
            records_loaded = await loader.load(source.records())

        except ETLException as e:
            e.context.setdefault("table_name", table_name)
            e.context.setdefault("file_path", str(source.file_path))
            raise

        except Exception as e:
            raise ETLException(
                "Unexpected error in source pipeline",
                context={
                    "table_name": table_name,
                    "file_path": str(source.file_path),
                },
                original_exception=e
            )

        return {
            "status": ETLStatus.SUCCESS.value,
            "table_name": table_name,
            "file_path": str(source.file_path),
            "columns": [c.name for c in columns],
            "records_loaded": records_loaded,
            "batches": loader.batches_flushed,
        }

    async def run(self, directory: Union[str, Path]) -> Dict[str, Any]:
        """
        Load every CSV file of a directory into its own table.

        Returns:
            Dictionary with run statistics:
            - status: "success", "partial_success" or "failed"
            - sources_total / sources_succeeded / sources_failed
            - records_loaded: Rows inserted across all successful sources
            - results: One result dictionary per source

        Raises:
            ExtractionError: If the directory does not exist
        """
        directory = Path(directory)

        try:
            if not directory.is_dir():
                raise ExtractionError(
                    "Source directory does not exist",
                    context={"directory": str(directory)}
                )

            files = list_source_files(directory, self.extension)
            logger.info(f"Found {len(files)} source files in {directory}")

            shared = self._shared_table_names(files)

            outcomes = await asyncio.gather(
                *(self._run_unique_source(path, shared) for path in files),
                return_exceptions=True
            )

            results = [
                self._failure(path, outcome) if isinstance(outcome, BaseException) else outcome
                for path, outcome in zip(files, outcomes)
            ]
            summary = self._summarize(results)

            logger.info(
                f"ETL run completed: {summary['status']} - "
                f"Sources: {summary['sources_succeeded']}/{summary['sources_total']}, "
                f"Loaded: {summary['records_loaded']}"
            )
            return summary

        finally:
            await self.store.dispose()

    @staticmethod
    def _shared_table_names(files: List[Path]) -> Set[str]:
        # SQLite table names are case-insensitive, "a.csv" and "A.CSV" collide
        counts = Counter(path.stem.lower() for path in files)
        return {name for name, count in counts.items() if count > 1}

    async def _run_unique_source(self, path: Path, shared: Set[str]) -> Dict[str, Any]:
        if path.stem.lower() in shared:
            raise ExtractionError(
                "Another source file maps to the same table",
                context={"table_name": path.stem, "file_path": str(path)}
            )
        return await self.run_source(path)

    def _failure(self, path: Path, error: BaseException) -> Dict[str, Any]:
        # Batches flushed before the failure stay in the table
        rows_committed = 0

        if isinstance(error, ETLException):
            error_detail = error.to_dict()
            rows_committed = error.context.get("rows_inserted", 0)
        else:
            error_detail = {
                "error_type": type(error).__name__,
                "message": str(error),
            }

        logger.error(
            f"ETL failed for {path.name}: {error}",
            extra={"error_context": error_detail}
        )

        return {
            "status": ETLStatus.FAILED.value,
            "table_name": path.stem,
            "file_path": str(path),
            "records_loaded": rows_committed,
            "error": error_detail,
        }

    @staticmethod
    def _summarize(results: List[Dict[str, Any]]) -> Dict[str, Any]:
        failed = [r for r in results if r["status"] == ETLStatus.FAILED.value]
        succeeded = len(results) - len(failed)

        if not failed:
            status = ETLStatus.SUCCESS
        elif succeeded == 0:
            status = ETLStatus.FAILED
        else:
            status = ETLStatus.PARTIAL

        return {
            "status": status.value,
            "sources_total": len(results),
            "sources_succeeded": succeeded,
            "sources_failed": len(failed),
            "records_loaded": sum(r["records_loaded"] for r in results),
            "results": results,
        }
