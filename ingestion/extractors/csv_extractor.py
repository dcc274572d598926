"""
CSV record source with chunked, forward-only reading
"""

import asyncio
import warnings
import pandas as pd
from pandas.errors import EmptyDataError, ParserError, ParserWarning
from typing import AsyncIterator, Dict, List, Optional, Union
from pathlib import Path
from core.exceptions import CSVExtractionError, EmptySourceError
import logging

logger = logging.getLogger(__name__)


class CSVRecordSource:
    """
    Read one CSV file as a header plus a lazy sequence of records.

    Supports:
    - Header read without touching the data rows
    - Chunked reading, at most chunk_size rows held per chunk
    - Records as column -> raw string mappings, no type inference

    Every call to records() reopens the file. Malformed rows and decoding
    errors end the sequence with CSVExtractionError, no row is skipped.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        chunk_size: int = 100,
        encoding: str = "utf-8"
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

        self.file_path = Path(file_path)
        self.chunk_size = chunk_size
        self.encoding = encoding

    @property
    def table_name(self) -> str:
        """Target table name, the file name without extension"""
        return self.file_path.stem

    async def read_header(self) -> List[str]:
        """
        Read the column names from the first row.

        Raises:
            EmptySourceError: The file has no rows at all
            CSVExtractionError: The file cannot be read or decoded
        """
        return await asyncio.to_thread(self._read_header)

    async def records(self) -> AsyncIterator[Dict[str, str]]:
        """Yield one dict per data row, in file order."""
        reader = await asyncio.to_thread(self._open_reader)
        rows_read = 0

        try:
            while True:
                chunk = await asyncio.to_thread(self._next_chunk, reader, rows_read)
                if chunk is None:
                    break

                for record in chunk.to_dict(orient="records"):
                    rows_read += 1
                    yield {
                        column: "" if pd.isna(value) else value
                        for column, value in record.items()
                    }
        finally:
            reader.close()

        logger.debug(f"Read {rows_read} records from {self.file_path}")

    def _read_csv(self, **kwargs):
        # Everything is read as text, empty fields stay empty strings.
        # index_col=False keeps pandas from turning an extra leading field
        # into an index, surplus fields then surface as a ParserWarning.
        with warnings.catch_warnings():
            warnings.simplefilter("error", ParserWarning)
            return pd.read_csv(
                self.file_path,
                dtype=str,
                keep_default_na=False,
                index_col=False,
                encoding=self.encoding,
                **kwargs
            )

    def _read_header(self) -> List[str]:
        try:
            frame = self._read_csv(nrows=0)
        except EmptyDataError as e:
            raise EmptySourceError(
                "CSV file is empty or does not contain headers",
                context={"file_path": str(self.file_path)},
                original_exception=e
            )
        except (ParserError, ParserWarning, UnicodeDecodeError, OSError) as e:
            raise CSVExtractionError(
                "Failed to read CSV header",
                context={"file_path": str(self.file_path)},
                original_exception=e
            )

        return [str(column) for column in frame.columns]

    def _open_reader(self):
        try:
            return self._read_csv(chunksize=self.chunk_size)
        except EmptyDataError as e:
            raise EmptySourceError(
                "CSV file is empty or does not contain headers",
                context={"file_path": str(self.file_path)},
                original_exception=e
            )
        except (ParserError, ParserWarning, UnicodeDecodeError, OSError) as e:
            raise CSVExtractionError(
                "Failed to open CSV file",
                context={"file_path": str(self.file_path)},
                original_exception=e
            )

    def _next_chunk(self, reader, rows_read: int) -> Optional[pd.DataFrame]:
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("error", ParserWarning)
                return next(reader, None)
        except (ParserError, ParserWarning, UnicodeDecodeError, ValueError) as e:
            raise CSVExtractionError(
                "Malformed CSV row",
                context={
                    "file_path": str(self.file_path),
                    "rows_read": rows_read,
                },
                original_exception=e
            )
