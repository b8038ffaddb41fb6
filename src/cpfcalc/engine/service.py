"""ContributionService: the operations the HTTP layer exposes.

A single calculation path is shared by the pure preview and the
calculate-and-save operation; persistence is layered on top of it.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from cpfcalc.core.exceptions import ValidationError
from cpfcalc.core.logging_config import get_logger
from cpfcalc.core.protocols import IRecordStore
from cpfcalc.engine.calculator import ContributionCalculator
from cpfcalc.engine.rate_table import RateKey, RateTable
from cpfcalc.models.contribution import (
    CalculationRecord,
    CalculationRequest,
    ContributionResult,
    NewCalculationRecord,
)
from cpfcalc.models.rates import AgeGroup, CitizenshipStatus, RateEntry

logger = get_logger("engine.service")

_SHARE_MIN = Decimal("0")
_SHARE_MAX = Decimal("1")


def describe_errors(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into one line: ``field.path: message; ...``."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def to_request(data: CalculationRequest | Mapping[str, Any]) -> CalculationRequest:
    """Validate raw input into a CalculationRequest, raising our ValidationError."""
    if isinstance(data, CalculationRequest):
        return data
    if not isinstance(data, Mapping):
        raise ValidationError(f"Expected an object, got {type(data).__name__}")
    try:
        return CalculationRequest.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(describe_errors(exc)) from exc


def _enum(enum_cls, value: Any, field: str):
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field}: must be one of {allowed}", field=field) from exc


def _share(value: Any, field: str) -> Decimal:
    try:
        share = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"{field}: must be a number", field=field) from exc
    if not share.is_finite() or not _SHARE_MIN <= share <= _SHARE_MAX:
        raise ValidationError(f"{field}: must be between 0 and 1", field=field)
    return share


class ContributionService:
    """Calculation, history and rate-configuration operations."""

    def __init__(
        self,
        rate_table: RateTable,
        store: IRecordStore,
        calculator: ContributionCalculator | None = None,
    ) -> None:
        self._rates = rate_table
        self._store = store
        self._calculator = calculator or ContributionCalculator()

    @property
    def store(self) -> IRecordStore:
        return self._store

    # ---- calculation ----

    def calculate(self, request: CalculationRequest | Mapping[str, Any]) -> ContributionResult:
        """Calculate without persisting anything."""
        request = to_request(request)
        rates = self._rates.get(request.citizenship, request.age_group)
        return self._calculator.calculate(rates, request.salary_details, request.citizenship)

    def calculate_and_save(self, request: CalculationRequest | Mapping[str, Any]) -> CalculationRecord:
        """Calculate, then append the result to the record store.

        Nothing is stored unless the calculation succeeds.
        """
        request = to_request(request)
        result = self.calculate(request)
        record = self._store.append(NewCalculationRecord.from_request(request, result))
        logger.debug(
            "CPF calculation saved",
            extra={"employee_id": record.employee_id, "record_id": record.record_id},
        )
        return record

    # ---- history ----

    def get_history(
        self,
        employee_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[CalculationRecord]:
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("startDate must not be later than endDate", field="startDate")
        return self._store.query_by_employee(employee_id, start_date, end_date)

    def list_all(self) -> list[CalculationRecord]:
        return self._store.query_all()

    # ---- rates ----

    def get_rates(self, citizenship: CitizenshipStatus | str, age_group: AgeGroup | str) -> RateEntry:
        return self._rates.get(
            _enum(CitizenshipStatus, citizenship, "citizenship"),
            _enum(AgeGroup, age_group, "ageGroup"),
        )

    def rate_table(self) -> dict[RateKey, RateEntry]:
        return self._rates.snapshot()

    def update_rates(
        self,
        citizenship: CitizenshipStatus | str,
        age_group: AgeGroup | str,
        employee_share: Any,
        employer_share: Any,
    ) -> RateEntry:
        """Validate and apply a rate change. Past records are not recalculated."""
        return self._rates.update(
            _enum(CitizenshipStatus, citizenship, "citizenship"),
            _enum(AgeGroup, age_group, "ageGroup"),
            _share(employee_share, "employeeShare"),
            _share(employer_share, "employerShare"),
        )
