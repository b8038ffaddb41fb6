"""Rate bracket keys and contribution rate entries."""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum

from pydantic import ConfigDict, computed_field

from cpfcalc.models.base import Amount, CamelModel


class CitizenshipStatus(StrEnum):
    CITIZEN = "CITIZEN"
    FOREIGNER = "FOREIGNER"


class AgeGroup(StrEnum):
    BELOW_55 = "BELOW_55"
    AGE_55_TO_60 = "55_TO_60"
    AGE_60_TO_65 = "60_TO_65"
    AGE_65_TO_70 = "65_TO_70"
    ABOVE_70 = "ABOVE_70"


class RateEntry(CamelModel):
    """Employee/employer contribution rates for one (citizenship, age group) bracket.

    ``total_rate`` is always derived from the two shares and cannot be set.
    """

    model_config = ConfigDict(frozen=True)

    employee_share: Amount
    employer_share: Amount

    @computed_field(alias="totalRate")  # type: ignore[prop-decorator]
    @property
    def total_rate(self) -> Amount:
        return self.employee_share + self.employer_share

    @classmethod
    def of(cls, employee_share: Decimal | str, employer_share: Decimal | str) -> RateEntry:
        return cls(employee_share=Decimal(employee_share), employer_share=Decimal(employer_share))
