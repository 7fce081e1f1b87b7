"""In-memory working set of bulk-booking rows for one agent."""
from __future__ import annotations

import itertools
from typing import Dict, Iterable, List, Optional

from agent_portal.schemas.bulk import BatchView, BulkRow, BulkRowUpdate
from agent_portal.services.exceptions import NotFoundError


class BulkBatch:
    """Rows being prepared for one bulk submission.

    A batch is never empty after construction or ``reset``; it always starts
    with a single blank pending row. Not thread-safe: callers mutate it from
    the event loop only.
    """

    def __init__(self, rows: Iterable[BulkRow] | None = None) -> None:
        self._counter = itertools.count(1)
        self.rows: List[BulkRow] = list(rows) if rows is not None else [self._blank_row()]
        self.submitting = False

    def _blank_row(self) -> BulkRow:
        return BulkRow(id=f"row-{next(self._counter)}")

    def get_row(self, row_id: str) -> BulkRow:
        row = self._find(row_id)
        if row is None:
            raise NotFoundError(f"Row {row_id} not found in batch")
        return row

    def _find(self, row_id: str) -> Optional[BulkRow]:
        return next((row for row in self.rows if row.id == row_id), None)

    def add_row(self) -> BulkRow:
        row = self._blank_row()
        self.rows.append(row)
        return row

    def update_row(self, row_id: str, update: BulkRowUpdate) -> BulkRow:
        row = self.get_row(row_id)
        for field, value in update.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(row, field, value)
        row.status = "pending"
        row.error = None
        return row

    def remove_row(self, row_id: str) -> None:
        row = self.get_row(row_id)
        self.rows.remove(row)

    def replace_rows(self, rows: Iterable[BulkRow]) -> None:
        self.rows = [row.model_copy(update={"status": "pending", "error": None}) for row in rows]

    def reset(self) -> None:
        self.rows = [self._blank_row()]

    def valid_rows(self) -> List[BulkRow]:
        return [row for row in self.rows if row.status == "valid"]

    def count(self, status: str) -> int:
        return sum(1 for row in self.rows if row.status == status)

    def view(self, *, consultation_fee: float, currency: str) -> BatchView:
        valid = self.count("valid")
        return BatchView(
            rows=[row.model_copy() for row in self.rows],
            valid_count=valid,
            invalid_count=self.count("invalid"),
            pending_count=self.count("pending"),
            estimated_total=valid * consultation_fee,
            currency=currency,
            submitting=self.submitting,
        )


class BatchRepository:
    """Working batches keyed by agent id."""

    def __init__(self) -> None:
        self._batches: Dict[str, BulkBatch] = {}

    def get(self, agent_id: str) -> BulkBatch:
        batch = self._batches.get(agent_id)
        if batch is None:
            batch = self._batches[agent_id] = BulkBatch()
        return batch

    def discard(self, agent_id: str) -> None:
        self._batches.pop(agent_id, None)


_batch_repository: Optional[BatchRepository] = None


def get_batch_repository() -> BatchRepository:
    global _batch_repository
    if _batch_repository is None:
        _batch_repository = BatchRepository()
    return _batch_repository


def reset_batch_repository() -> None:
    global _batch_repository
    _batch_repository = None
