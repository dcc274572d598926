"""
Filesystem helpers: directory bootstrap, archive naming and source discovery
"""

from pathlib import Path
from typing import List, Union
import logging

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_ARCHIVE_SUFFIXES = (".tar.gz", ".tgz", ".tar", ".gz")


def ensure_directory(base_dir: PathLike, name: str = "") -> Path:
    """Create base_dir/name (and parents) if missing, return the path."""
    directory = Path(base_dir) / name if name else Path(base_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def archive_stem(archive_path: PathLike) -> str:
    """
    Name of the archive without its compression/archive suffixes.

    "dump.tar.gz" -> "dump", "dump.tgz" -> "dump", "dump.tar" -> "dump".
    """
    name = Path(archive_path).name
    lowered = name.lower()
    for suffix in _ARCHIVE_SUFFIXES:
        if lowered.endswith(suffix) and len(name) > len(suffix):
            return name[: -len(suffix)]
    return Path(name).stem


def list_source_files(directory: PathLike, extension: str = ".csv") -> List[Path]:
    """
    List the files of a directory that are record sources.

    Matches the extension case-insensitively and skips hidden files and
    subdirectories. Results are sorted by name so runs are reproducible.
    """
    directory = Path(directory)
    extension = extension.lower()

    files = sorted(
        path for path in directory.iterdir()
        if path.is_file()
        and not path.name.startswith(".")
        and path.suffix.lower() == extension
    )

    logger.debug(f"Found {len(files)} {extension} files in {directory}")
    return files
