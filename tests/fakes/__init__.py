"""Shared test doubles — re-export memory backends and failing stores."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from cpfcalc.core.exceptions import StorageError
from cpfcalc.models.contribution import CalculationRecord, NewCalculationRecord
from cpfcalc.persistence.memory_backend import MemoryRecordStore


class FixedClock:
    """Deterministic clock: returns ``start`` and advances by ``step`` on each call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(0)) -> None:
        self.now = start or datetime(2024, 3, 15, 9, 30, tzinfo=UTC)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + self.step
        return current


class FailingRecordStore(MemoryRecordStore):
    """MemoryRecordStore that raises StorageError for selected employee ids."""

    def __init__(self, failing_ids: set[str] | None = None, fail_all: bool = False) -> None:
        super().__init__()
        self.failing_ids = failing_ids or set()
        self.fail_all = fail_all

    def append(self, record: NewCalculationRecord) -> CalculationRecord:
        if self.fail_all or record.employee_id in self.failing_ids:
            raise StorageError(f"store unavailable for {record.employee_id}")
        return super().append(record)


__all__ = ["FailingRecordStore", "FixedClock", "MemoryRecordStore"]
