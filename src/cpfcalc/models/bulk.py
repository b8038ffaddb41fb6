"""Bulk calculation outcome models."""

from __future__ import annotations

from pydantic import Field, computed_field

from cpfcalc.models.base import CamelModel
from cpfcalc.models.contribution import CalculationRecord


class BulkFailure(CamelModel):
    """A single batch entry that could not be calculated or saved."""

    index: int
    employee_id: str = ""
    reason: str


class BulkResult(CamelModel):
    """Partitioned outcome of a batch. Every input lands in exactly one list."""

    successes: list[CalculationRecord] = Field(default_factory=list)
    failures: list[BulkFailure] = Field(default_factory=list)

    @computed_field(alias="successfulCount")  # type: ignore[prop-decorator]
    @property
    def successful_count(self) -> int:
        return len(self.successes)

    @computed_field(alias="failedCount")  # type: ignore[prop-decorator]
    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @computed_field(alias="totalProcessed")  # type: ignore[prop-decorator]
    @property
    def total_processed(self) -> int:
        return self.successful_count + self.failed_count
