"""ContributionCalculator: CPF contribution breakdown for one salary.

Ordinary wages (basic salary) and additional wages (bonus plus other
non-recurring pay) are capped separately before the bracket's total rate is
applied. The total is then split between employee and employer in proportion
to their shares, so the two parts always add back up to the total.
"""

from __future__ import annotations

from decimal import Decimal

from cpfcalc.models.contribution import ContributionResult, SalaryDetails
from cpfcalc.models.rates import CitizenshipStatus, RateEntry

ORDINARY_WAGE_CEILING = Decimal("6000")
ADDITIONAL_WAGE_CEILING = Decimal("102000")

_ZERO = Decimal("0")


class ContributionCalculator:
    """Pure calculation; holds only the wage ceilings."""

    def __init__(
        self,
        ordinary_wage_ceiling: Decimal = ORDINARY_WAGE_CEILING,
        additional_wage_ceiling: Decimal = ADDITIONAL_WAGE_CEILING,
    ) -> None:
        self.ordinary_wage_ceiling = ordinary_wage_ceiling
        self.additional_wage_ceiling = additional_wage_ceiling

    def calculate(
        self,
        rates: RateEntry,
        salary: SalaryDetails,
        citizenship: CitizenshipStatus | None = None,
    ) -> ContributionResult:
        """Apply ``rates`` to ``salary``.

        ``citizenship`` is accepted for callers that carry it alongside the
        rates; it does not change the arithmetic.
        """
        total_rate = rates.total_rate

        ordinary_base = min(salary.basic_salary, self.ordinary_wage_ceiling)
        additional_base = min(salary.bonus + salary.additional_wages, self.additional_wage_ceiling)

        total = ordinary_base * total_rate + additional_base * total_rate

        if total_rate == _ZERO:
            employee = employer = _ZERO
        else:
            employee = total * rates.employee_share / total_rate
            employer = total * rates.employer_share / total_rate

        gross = salary.basic_salary + salary.bonus + salary.additional_wages

        return ContributionResult(
            employee_contribution=employee,
            employer_contribution=employer,
            total_contribution=total,
            gross_salary=gross,
            net_salary=gross - employee,
        )


_DEFAULT = ContributionCalculator()


def calculate(
    rates: RateEntry,
    salary: SalaryDetails,
    citizenship: CitizenshipStatus | None = None,
) -> ContributionResult:
    """Calculate with the statutory wage ceilings."""
    return _DEFAULT.calculate(rates, salary, citizenship)
