"""
Script to download the data dump and load every CSV file into the database
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, ingestion, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.exceptions import ETLException
from core.logging import setup_logging
from ingestion.pipeline import DataDumpPipeline
from models.base import ETLStatus

logger = logging.getLogger(__name__)


async def run_etl() -> int:
    """Run the data dump pipeline, return the process exit code"""

    if not settings.DUMP_DOWNLOAD_URL:
        logger.warning("DUMP_DOWNLOAD_URL is not set, an existing archive is required")

    try:
        summary = await DataDumpPipeline().run()
    except ETLException as e:
        logger.error(f"ETL pipeline error: {e}", extra={"error_context": e.to_dict()})
        return 1

    for result in summary["results"]:
        if result["status"] == ETLStatus.FAILED.value:
            logger.error(
                f"{result['table_name']}: failed - {result['error']['message']}"
            )
        else:
            logger.info(
                f"{result['table_name']}: loaded {result['records_loaded']} rows "
                f"in {result['batches']} batches"
            )

    if summary["status"] != ETLStatus.SUCCESS.value:
        logger.error(
            f"{summary['sources_failed']} of {summary['sources_total']} sources failed"
        )
        return 1

    logger.info("Database Successfully Created")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_etl()))
