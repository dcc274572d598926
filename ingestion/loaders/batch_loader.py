"""
Batch loader: coerce records, accumulate fixed-size batches, flush to the store
"""

from typing import Any, AsyncIterable, Dict, List, Optional, Sequence
from core.config import settings
from core.exceptions import BatchInsertError, CoercionError
from ingestion.transformers.coercer import RecordCoercer
from schemas.columns import ColumnSchemaEntry
import logging

logger = logging.getLogger(__name__)


class BatchLoader:
    """
    Load one record source into its table in batches of batch_size rows.

    Ensures:
    - Intake stops while a full batch is being inserted: the next record is
      only requested from the source after the insert has completed, so no
      more than batch_size coerced records are held at once
    - Rows reach the store in source order, each in exactly one insert
    - A trailing partial batch is flushed when the source is exhausted
    - A coercion failure discards the batch it would have joined and ends
      the load; batches flushed before it stay committed
    """

    def __init__(
        self,
        store,
        table_name: str,
        columns: Sequence[ColumnSchemaEntry],
        batch_size: Optional[int] = None
    ):
        batch_size = settings.ETL_BATCH_SIZE if batch_size is None else batch_size
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.store = store
        self.table_name = table_name
        self.batch_size = batch_size
        self.coercer = RecordCoercer(columns)

        self.batch: List[Dict[str, Any]] = []
        self.rows_read = 0
        self.rows_inserted = 0
        self.batches_flushed = 0

    async def load(self, records: AsyncIterable[Dict[str, Any]]) -> int:
        """
        Consume records until exhausted and insert them all.

        Returns:
            Number of rows inserted, reported only after the final flush

        Raises:
            CoercionError: A typed column value could not be converted
            BatchInsertError: The store rejected a batch
        """
        stream = aiter(records)
        try:
            async for record in stream:
                self.rows_read += 1
                try:
                    self.batch.append(self.coercer.coerce(record, self.rows_read))
                except CoercionError as e:
                    e.context.update({
                        "table_name": self.table_name,
                        "batch_index": self.batches_flushed + 1,
                        "rows_inserted": self.rows_inserted,
                    })
                    self.batch = []
                    raise

                if len(self.batch) >= self.batch_size:
                    await self.flush()
        finally:
            if hasattr(stream, "aclose"):
                await stream.aclose()

        await self.flush()

        logger.info(
            f'Loaded {self.rows_inserted} rows into table "{self.table_name}" '
            f"in {self.batches_flushed} batches"
        )
        return self.rows_inserted

    async def flush(self) -> int:
        """Insert the pending batch, if any, as one bulk insert."""
        if not self.batch:
            return 0

        rows, self.batch = self.batch, []
        batch_index = self.batches_flushed + 1

        try:
            await self.store.batch_insert(self.table_name, rows)
        except Exception as e:
            raise BatchInsertError(
                "Failed to insert batch",
                context={
                    "table_name": self.table_name,
                    "batch_index": batch_index,
                    "batch_size": len(rows),
                    "rows_inserted": self.rows_inserted,
                },
                original_exception=e
            )

        self.batches_flushed += 1
        self.rows_inserted += len(rows)
        logger.info(f'Inserted {self.rows_inserted} rows into table "{self.table_name}"')
        return len(rows)
