"""Helpers shared by the calculation record backends."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import UTC, date, datetime

from cpfcalc.models.contribution import CalculationRecord


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_record_id() -> str:
    return uuid.uuid4().hex


def in_date_range(calculated_at: datetime, start_date: date | None, end_date: date | None) -> bool:
    """Inclusive bounds on the UTC calendar date of ``calculated_at``."""
    day = calculated_at.astimezone(UTC).date()
    if start_date is not None and day < start_date:
        return False
    if end_date is not None and day > end_date:
        return False
    return True


def newest_first(records: Iterable[CalculationRecord]) -> list[CalculationRecord]:
    """Sort by ``calculated_at`` descending.

    ``records`` must arrive in insertion order; the sort is stable, so equal
    timestamps keep that order.
    """
    return sorted(records, key=lambda r: r.calculated_at, reverse=True)
