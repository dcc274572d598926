"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from pathlib import Path
from ingestion.loaders.sql_store import SQLStore


@pytest.fixture
def database_url(tmp_path):
    """SQLite database file inside the test's temporary directory"""
    return f"sqlite+aiosqlite:///{tmp_path / 'out' / 'database.sqlite'}"


@pytest.fixture
def write_csv(tmp_path):
    """Factory writing CSV text to <tmp_path>/csv/<name>"""
    directory = tmp_path / "csv"
    directory.mkdir(exist_ok=True)

    def _write(name: str, content: str) -> Path:
        path = directory / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest_asyncio.fixture(scope="function")
async def store(database_url):
    """Store on a fresh SQLite file, disposed after the test"""
    sql_store = SQLStore(database_url=database_url)
    yield sql_store
    await sql_store.dispose()
