"""Salary inputs, contribution results, and stored calculation records."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, Field

from cpfcalc.models.base import Amount, CamelModel
from cpfcalc.models.rates import AgeGroup, CitizenshipStatus


class SalaryDetails(CamelModel):
    """Monthly salary components for one employee.

    A zero or missing basic salary and negative bonus/additional wages are
    rejected here, never clamped by the calculator.
    """

    model_config = ConfigDict(frozen=True)

    basic_salary: Amount = Field(gt=0)
    bonus: Amount = Field(default=Decimal("0"), ge=0)
    additional_wages: Amount = Field(default=Decimal("0"), ge=0)


class ContributionResult(CamelModel):
    """Breakdown of one contribution calculation."""

    model_config = ConfigDict(frozen=True)

    employee_contribution: Amount
    employer_contribution: Amount
    total_contribution: Amount
    gross_salary: Amount
    net_salary: Amount


class CalculationRequest(CamelModel):
    """One employee's calculation input, single or as part of a batch."""

    employee_id: str = Field(min_length=1)
    citizenship: CitizenshipStatus
    age_group: AgeGroup
    salary_details: SalaryDetails

    model_config = ConfigDict(str_strip_whitespace=True)


class NewCalculationRecord(CamelModel):
    """A calculation ready to be appended to the record store."""

    model_config = ConfigDict(frozen=True)

    employee_id: str
    citizenship: CitizenshipStatus
    age_group: AgeGroup
    salary_details: SalaryDetails
    calculations: ContributionResult

    @classmethod
    def from_request(cls, request: CalculationRequest, result: ContributionResult) -> NewCalculationRecord:
        return cls(
            employee_id=request.employee_id,
            citizenship=request.citizenship,
            age_group=request.age_group,
            salary_details=request.salary_details,
            calculations=result,
        )


class CalculationRecord(NewCalculationRecord):
    """Stored, immutable calculation record."""

    record_id: str
    calculated_at: datetime
