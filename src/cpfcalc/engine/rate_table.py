"""RateTable: the single active CPF contribution rate configuration.

One entry per (citizenship, age group) bracket, always fully populated.
Entries are immutable and replaced whole under a per-cell lock, so a
concurrent lookup sees either the previous or the new entry.
"""

from __future__ import annotations

import threading
from decimal import Decimal

from cpfcalc.core.exceptions import ConfigurationError
from cpfcalc.core.logging_config import get_logger
from cpfcalc.models.rates import AgeGroup, CitizenshipStatus, RateEntry

logger = get_logger("engine.rate_table")

RateKey = tuple[CitizenshipStatus, AgeGroup]

DEFAULT_RATES: dict[RateKey, RateEntry] = {
    (CitizenshipStatus.CITIZEN, AgeGroup.BELOW_55): RateEntry.of("0.2", "0.17"),
    (CitizenshipStatus.CITIZEN, AgeGroup.AGE_55_TO_60): RateEntry.of("0.17", "0.155"),
    (CitizenshipStatus.CITIZEN, AgeGroup.AGE_60_TO_65): RateEntry.of("0.115", "0.12"),
    (CitizenshipStatus.CITIZEN, AgeGroup.AGE_65_TO_70): RateEntry.of("0.075", "0.09"),
    (CitizenshipStatus.CITIZEN, AgeGroup.ABOVE_70): RateEntry.of("0.05", "0.075"),
    **{
        (CitizenshipStatus.FOREIGNER, age_group): RateEntry.of("0", "0")
        for age_group in AgeGroup
    },
}


def _key(citizenship: CitizenshipStatus | str, age_group: AgeGroup | str) -> RateKey:
    try:
        return CitizenshipStatus(citizenship), AgeGroup(age_group)
    except ValueError as exc:
        raise ConfigurationError(citizenship, age_group) from exc


class RateTable:
    """In-memory rate table seeded with the statutory defaults."""

    def __init__(self, initial: dict[RateKey, RateEntry] | None = None) -> None:
        self._entries: dict[RateKey, RateEntry] = dict(DEFAULT_RATES)
        if initial:
            self._entries.update(initial)
        self._locks: dict[RateKey, threading.Lock] = {key: threading.Lock() for key in self._entries}

    def get(self, citizenship: CitizenshipStatus | str, age_group: AgeGroup | str) -> RateEntry:
        key = _key(citizenship, age_group)
        lock = self._locks.get(key)
        if lock is None:
            raise ConfigurationError(citizenship, age_group)
        with lock:
            return self._entries[key]

    def update(
        self,
        citizenship: CitizenshipStatus | str,
        age_group: AgeGroup | str,
        employee_share: Decimal,
        employer_share: Decimal,
    ) -> RateEntry:
        """Replace one bracket's rates. Shares must already be range-checked."""
        key = _key(citizenship, age_group)
        entry = RateEntry.of(employee_share, employer_share)
        with self._locks[key]:
            previous = self._entries[key]
            self._entries[key] = entry
        logger.info(
            "CPF rates updated",
            extra={
                "citizenship": key[0].value,
                "age_group": key[1].value,
                "previous_total_rate": previous.total_rate,
                "total_rate": entry.total_rate,
            },
        )
        return entry

    def snapshot(self) -> dict[RateKey, RateEntry]:
        """Copy of every bracket's current entry."""
        result: dict[RateKey, RateEntry] = {}
        for key, lock in self._locks.items():
            with lock:
                result[key] = self._entries[key]
        return result
