"""
Gzip decompression and tar extraction of the downloaded archive.

The archive is read as a stream: gzip decompresses on the fly and the tar
reader consumes it in forward-only mode, so neither the compressed nor the
raw archive is loaded into memory.

Idempotence is tracked with a completion marker written next to the
extracted directory once every member has been unpacked. A directory that
exists without its marker comes from an interrupted run and is extracted
again.
"""

import asyncio
import gzip
import tarfile
from pathlib import Path
from typing import Any, Dict, Union
from core.exceptions import ArchiveExtractionError
from ingestion.extractors.files import archive_stem
from models.base import ETLStatus
import logging

logger = logging.getLogger(__name__)


def completion_marker(destination: Path, stem: str) -> Path:
    """Marker file recording that destination/stem was fully extracted."""
    return destination / f".{stem}.extracted"


def _unpack(source_path: Path, destination: Path) -> int:
    """Blocking decompress + unpack, returns the number of archive members."""
    with gzip.open(source_path, "rb") as raw_stream:
        with tarfile.open(fileobj=raw_stream, mode="r|") as archive:
            archive.extractall(path=destination, filter="data")
            return len(archive.getmembers())


async def extract_archive(
    source_path: Union[str, Path],
    destination: Union[str, Path]
) -> Dict[str, Any]:
    """
    Decompress and unpack a .tar.gz archive into destination.

    Returns:
        Dictionary with status ("success" or "skipped"), the extracted
        directory path, member count and a human-readable message

    Raises:
        ArchiveExtractionError: Unreadable source, unwritable destination,
            corrupt gzip stream or corrupt tar structure
    """
    source_path = Path(source_path)
    destination = Path(destination)
    stem = archive_stem(source_path)
    extracted_dir = destination / stem
    marker = completion_marker(destination, stem)

    if extracted_dir.exists() and marker.exists():
        message = f"Destination directory already exists at {extracted_dir}. Skipping extraction."
        logger.info(message)
        return {
            "status": ETLStatus.SKIPPED.value,
            "path": str(extracted_dir),
            "members": 0,
            "message": message,
        }

    if extracted_dir.exists():
        logger.warning(
            f"{extracted_dir} exists without a completion marker, "
            f"extracting {source_path.name} again"
        )

    logger.info(f"Extracting file to {destination}")

    try:
        members = await asyncio.to_thread(_unpack, source_path, destination)
        marker.touch()

    except (OSError, EOFError, tarfile.TarError) as e:
        raise ArchiveExtractionError(
            "Failed to extract archive",
            context={
                "source_path": str(source_path),
                "destination": str(destination),
            },
            original_exception=e
        )

    message = f"Extraction complete. Files saved to {destination}"
    logger.info(f"{message} ({members} members)")
    return {
        "status": ETLStatus.SUCCESS.value,
        "path": str(extracted_dir),
        "members": members,
        "message": message,
    }
