"""Protocol interfaces for the CPF calculator's swappable collaborators.

Structural typing, no inheritance required, easy to test with isinstance().
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, runtime_checkable

from cpfcalc.models.contribution import CalculationRecord, NewCalculationRecord
from cpfcalc.models.rates import AgeGroup, CitizenshipStatus, RateEntry


# ---------------------------------------------------------------------------
# Rate configuration
# ---------------------------------------------------------------------------

@runtime_checkable
class IRateTable(Protocol):
    """Process-wide (citizenship, age group) -> RateEntry configuration."""

    def get(self, citizenship: CitizenshipStatus, age_group: AgeGroup) -> RateEntry: ...

    def update(
        self,
        citizenship: CitizenshipStatus,
        age_group: AgeGroup,
        employee_share: Decimal,
        employer_share: Decimal,
    ) -> RateEntry: ...


# ---------------------------------------------------------------------------
# Persistence: Calculation records
# ---------------------------------------------------------------------------

@runtime_checkable
class IRecordStore(Protocol):
    """Append-only store of calculation records, newest first on read."""

    def append(self, record: NewCalculationRecord) -> CalculationRecord: ...

    def query_by_employee(
        self,
        employee_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[CalculationRecord]: ...

    def query_all(self) -> list[CalculationRecord]: ...
