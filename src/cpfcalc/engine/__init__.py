"""CPF contribution engine: rate table, calculator, service facade, bulk processor."""

from __future__ import annotations

from cpfcalc.engine.bulk import BulkProcessor
from cpfcalc.engine.calculator import (
    ADDITIONAL_WAGE_CEILING,
    ORDINARY_WAGE_CEILING,
    ContributionCalculator,
    calculate,
)
from cpfcalc.engine.rate_table import DEFAULT_RATES, RateTable
from cpfcalc.engine.service import ContributionService

__all__ = [
    "ADDITIONAL_WAGE_CEILING",
    "DEFAULT_RATES",
    "ORDINARY_WAGE_CEILING",
    "BulkProcessor",
    "ContributionCalculator",
    "ContributionService",
    "RateTable",
    "calculate",
]
