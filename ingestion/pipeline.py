"""
Data dump pipeline: download, extract, then load every extracted CSV file.

Re-running is safe: the download is skipped when the archive is already on
disk, extraction is skipped when its completion marker is present, and every
table is dropped and recreated by the runner.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
from core.config import settings
from ingestion.extractors.archive_extractor import extract_archive
from ingestion.extractors.files import ensure_directory
from ingestion.extractors.http_downloader import ArchiveDownloader
from ingestion.loaders.sql_store import SQLStore
from ingestion.runner import ETLRunner
from ingestion.transformers.schema_deriver import SchemaDeriver
import logging

logger = logging.getLogger(__name__)


class DataDumpPipeline:
    """
    End-to-end run for one remote archive.

    Layout under base_dir:
        <work_dir>/<archive_name>   downloaded archive
        <work_dir>/<archive stem>/  extracted CSV files
        <output_dir>/               database file (default SQLite URL)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        base_dir: Union[str, Path] = ".",
        work_dir: Optional[str] = None,
        output_dir: Optional[str] = None,
        archive_name: Optional[str] = None,
        database_url: Optional[str] = None,
        batch_size: Optional[int] = None,
        downloader: Optional[ArchiveDownloader] = None,
        schema_deriver: Optional[SchemaDeriver] = None
    ):
        self.url = url or settings.DUMP_DOWNLOAD_URL
        self.base_dir = Path(base_dir)
        self.work_dir = work_dir or settings.WORK_DIR
        self.output_dir = output_dir or settings.OUTPUT_DIR
        self.archive_name = archive_name or settings.ARCHIVE_NAME
        self.database_url = database_url or settings.DATABASE_URL
        self.batch_size = batch_size or settings.ETL_BATCH_SIZE
        self.downloader = downloader or ArchiveDownloader()
        self.schema_deriver = schema_deriver

    async def run(self) -> Dict[str, Any]:
        """
        Download, extract and load.

        Returns:
            The runner summary, with the download and extraction results
            added under "download" and "extraction"

        Raises:
            DownloadError: The archive could not be fetched
            ArchiveExtractionError: The archive could not be unpacked
        """
        work_dir = ensure_directory(self.base_dir, self.work_dir)
        archive_path = work_dir / self.archive_name

        download = await self.downloader.download(self.url, archive_path)
        extraction = await extract_archive(archive_path, work_dir)

        ensure_directory(self.base_dir, self.output_dir)

        logger.info("Creating database...")
        runner = ETLRunner(
            SQLStore(database_url=self.database_url),
            schema_deriver=self.schema_deriver,
            batch_size=self.batch_size
        )
        summary = await runner.run(extraction["path"])

        summary["download"] = download
        summary["extraction"] = extraction
        return summary
