"""Request bodies accepted by the CPF endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import Field

from cpfcalc.models.base import CamelModel
from cpfcalc.models.rates import AgeGroup, CitizenshipStatus


class BulkCalculationBody(CamelModel):
    """Entries are left raw so each one is validated, and can fail, on its own."""

    employees: list[Any]


class RateUpdateBody(CamelModel):
    citizenship: CitizenshipStatus
    age_group: AgeGroup
    employee_share: Decimal = Field(ge=0, le=1)
    employer_share: Decimal = Field(ge=0, le=1)
