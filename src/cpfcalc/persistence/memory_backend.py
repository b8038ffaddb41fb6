"""In-memory calculation record store. Default backend and unit-test fake."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import date, datetime

from cpfcalc.models.contribution import CalculationRecord, NewCalculationRecord
from cpfcalc.persistence.records import in_date_range, new_record_id, newest_first, utcnow


class MemoryRecordStore:
    """List-backed IRecordStore. Appends are serialized by a lock."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock
        self._records: list[CalculationRecord] = []
        self._lock = threading.Lock()

    def append(self, record: NewCalculationRecord) -> CalculationRecord:
        stored = CalculationRecord(
            **dict(record),
            record_id=new_record_id(),
            calculated_at=self._clock(),
        )
        with self._lock:
            self._records.append(stored)
        return stored

    def query_by_employee(
        self,
        employee_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[CalculationRecord]:
        with self._lock:
            matches = [
                r for r in self._records
                if r.employee_id == employee_id
                and in_date_range(r.calculated_at, start_date, end_date)
            ]
        return newest_first(matches)

    def query_all(self) -> list[CalculationRecord]:
        with self._lock:
            records = list(self._records)
        return newest_first(records)
