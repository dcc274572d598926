"""
Test data builders and database readers shared by unit and integration tests
"""

import io
import tarfile
from pathlib import Path
from typing import Dict, List
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

CUSTOMERS_HEADER = [
    "Index", "Customer Id", "First Name", "Last Name", "Company",
    "City", "Country", "Email", "Subscription Date",
]

ORGANIZATIONS_HEADER = [
    "Index", "Organization Id", "Name", "Website", "Country",
    "Founded", "Industry", "Number of Employees",
]


def customers_csv(rows: int) -> str:
    """CSV text for a customers file with the given number of data rows"""
    lines = [",".join(CUSTOMERS_HEADER)]
    for i in range(1, rows + 1):
        lines.append(
            f"{i},CID{i:05d},First{i},Last{i},Company {i},"
            f"City {i},Country {i % 7},user{i}@example.com,2021-{(i % 12) + 1:02d}-{(i % 28) + 1:02d}"
        )
    return "\n".join(lines) + "\n"


def organizations_csv(rows: int) -> str:
    """CSV text for an organizations file with the given number of data rows"""
    lines = [",".join(ORGANIZATIONS_HEADER)]
    for i in range(1, rows + 1):
        lines.append(
            f"{i},OID{i:05d},Org {i},https://org{i}.example.com,Country {i % 5},"
            f"{1950 + i % 70},Industry {i % 9},{i * 10}"
        )
    return "\n".join(lines) + "\n"


def build_tar_gz(archive_path: Path, top_dir: str, files: Dict[str, str]) -> Path:
    """Write a .tar.gz holding top_dir/<name> for every file"""
    with tarfile.open(archive_path, "w:gz") as archive:
        directory = tarfile.TarInfo(top_dir)
        directory.type = tarfile.DIRTYPE
        directory.mode = 0o755
        archive.addfile(directory)

        for name, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(f"{top_dir}/{name}")
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))

    return archive_path


async def fetch_table(database_url: str, table_name: str) -> List[dict]:
    """Read a whole table through a separate engine, ordered by id"""
    engine = create_async_engine(database_url, poolclass=NullPool)
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text(f'SELECT * FROM "{table_name}" ORDER BY id'))
            return [dict(row._mapping) for row in result]
    finally:
        await engine.dispose()


async def fetch_columns(database_url: str, table_name: str) -> List[dict]:
    """Column info (name, type, notnull, pk) from SQLite's table_info pragma"""
    engine = create_async_engine(database_url, poolclass=NullPool)
    try:
        async with engine.connect() as conn:
            result = await conn.execute(text(f'PRAGMA table_info("{table_name}")'))
            return [dict(row._mapping) for row in result]
    finally:
        await engine.dispose()


