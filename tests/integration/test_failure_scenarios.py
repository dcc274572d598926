"""
Tests for failure scenarios and error handling
"""

import httpx
import pytest
from unittest.mock import AsyncMock
from core.exceptions import DownloadError, ExtractionError
from ingestion.extractors.http_downloader import ArchiveDownloader
from ingestion.loaders.sql_store import SQLStore
from ingestion.pipeline import DataDumpPipeline
from ingestion.runner import ETLRunner
from tests.helpers import build_tar_gz, customers_csv, fetch_table, organizations_csv


@pytest.fixture
def dump_dir(tmp_path):
    directory = tmp_path / "dump"
    directory.mkdir()
    return directory


@pytest.mark.asyncio
async def test_bad_integer_fails_only_its_source(dump_dir, database_url):
    """
    Test: one source has a non-numeric Index, its sibling still loads
    """
    lines = customers_csv(250).splitlines()
    lines[160] = lines[160].replace("160,", "one-sixty,", 1)
    (dump_dir / "customers.csv").write_text("\n".join(lines) + "\n")
    (dump_dir / "organizations.csv").write_text(organizations_csv(120))

    summary = await ETLRunner(SQLStore(database_url=database_url), batch_size=100).run(dump_dir)

    assert summary["status"] == "partial_success"
    assert summary["sources_failed"] == 1

    by_table = {r["table_name"]: r for r in summary["results"]}
    failed = by_table["customers"]
    assert failed["status"] == "failed"
    assert failed["error"]["error_type"] == "CoercionError"
    assert failed["error"]["context"]["row_number"] == 160
    assert failed["error"]["context"]["batch_index"] == 2

    assert by_table["organizations"]["status"] == "success"
    assert len(await fetch_table(database_url, "organizations")) == 120

    # Not transactional: the batch flushed before the bad row is kept
    assert failed["records_loaded"] == 100
    assert len(await fetch_table(database_url, "customers")) == 100


@pytest.mark.asyncio
async def test_bad_date_fails_its_source(dump_dir, database_url):
    (dump_dir / "customers.csv").write_text(
        "Index,Name,Subscription Date\n1,Ann,2020-01-01\n2,Bob,someday\n"
    )

    summary = await ETLRunner(SQLStore(database_url=database_url)).run(dump_dir)

    assert summary["status"] == "failed"
    assert summary["results"][0]["error"]["context"]["column_name"] == "Subscription Date"


@pytest.mark.asyncio
async def test_empty_file_reports_missing_header(dump_dir, database_url):
    (dump_dir / "customers.csv").write_text("")
    (dump_dir / "organizations.csv").write_text(organizations_csv(5))

    summary = await ETLRunner(SQLStore(database_url=database_url)).run(dump_dir)

    by_table = {r["table_name"]: r for r in summary["results"]}
    assert by_table["customers"]["error"]["error_type"] == "EmptySourceError"
    assert by_table["organizations"]["records_loaded"] == 5


@pytest.mark.asyncio
async def test_malformed_row_fails_its_source(dump_dir, database_url):
    (dump_dir / "organizations.csv").write_text(
        "Index,Name,Number of Employees\n1,A,10\n2,B,20\n3,C,30,extra\n"
    )

    summary = await ETLRunner(SQLStore(database_url=database_url)).run(dump_dir)

    error = summary["results"][0]["error"]
    assert error["error_type"] == "CSVExtractionError"
    assert error["context"]["table_name"] == "organizations"


@pytest.mark.asyncio
async def test_store_released_once_whatever_the_outcome(dump_dir):
    """
    Test: with failing and succeeding sources the store is disposed exactly once
    """
    (dump_dir / "customers.csv").write_text("")
    (dump_dir / "organizations.csv").write_text(organizations_csv(5))
    (dump_dir / "people.csv").write_text("a,b\n1,2\n")

    store = AsyncMock()
    store.batch_insert.side_effect = RuntimeError("Simulated DB failure during load")

    summary = await ETLRunner(store).run(dump_dir)

    assert summary["status"] == "failed"
    assert summary["sources_failed"] == 3
    store.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_missing_directory_still_releases_store(tmp_path):
    store = AsyncMock()

    with pytest.raises(ExtractionError):
        await ETLRunner(store).run(tmp_path / "nowhere")

    store.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_download_failure_stops_the_pipeline(tmp_path, database_url):
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    pipeline = DataDumpPipeline(
        url="https://example.com/dump.tar.gz",
        base_dir=tmp_path,
        database_url=database_url,
        downloader=ArchiveDownloader(transport=transport),
    )

    with pytest.raises(DownloadError):
        await pipeline.run()

    assert not (tmp_path / "tmp" / "dump.tar.gz").exists()


@pytest.mark.asyncio
async def test_end_to_end_rerun_skips_download_and_extraction(tmp_path, database_url):
    """
    Test: second run reuses the archive and the extraction, tables are rebuilt
    """
    archive = build_tar_gz(tmp_path / "source.tar.gz", "dump", {
        "customers.csv": customers_csv(250),
        "organizations.csv": organizations_csv(60),
    })
    payload = archive.read_bytes()
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, content=payload)

    def make_pipeline():
        return DataDumpPipeline(
            url="https://example.com/dump.tar.gz",
            base_dir=tmp_path,
            database_url=database_url,
            batch_size=100,
            downloader=ArchiveDownloader(transport=httpx.MockTransport(handler)),
        )

    first = await make_pipeline().run()

    assert first["status"] == "success"
    assert first["download"]["status"] == "success"
    assert first["extraction"]["status"] == "success"
    assert (tmp_path / "tmp" / "dump" / "customers.csv").exists()
    assert (tmp_path / "out").is_dir()

    second = await make_pipeline().run()

    assert len(requests) == 1
    assert second["download"]["status"] == "skipped"
    assert second["extraction"]["status"] == "skipped"
    assert second["status"] == "success"
    assert second["records_loaded"] == 310
    assert len(await fetch_table(database_url, "customers")) == 250
    assert len(await fetch_table(database_url, "organizations")) == 60
