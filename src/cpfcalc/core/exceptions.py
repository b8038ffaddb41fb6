"""CPF calculator exception hierarchy."""

from __future__ import annotations


class CPFError(Exception):
    """Base exception for all CPF calculator errors."""


class ValidationError(CPFError):
    """Malformed or out-of-range input. Always a client-side rejection."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class RecordNotFoundError(CPFError):
    """No calculation records match the query."""

    def __init__(self, employee_id: str) -> None:
        self.employee_id = employee_id
        super().__init__(f"No CPF records found for employee {employee_id!r}")


class ConfigurationError(CPFError):
    """Rate table lookup for a key outside the fixed enumerations."""

    def __init__(self, citizenship: object, age_group: object) -> None:
        self.citizenship = citizenship
        self.age_group = age_group
        super().__init__(
            f"No CPF rate configured for citizenship={citizenship!r}, age_group={age_group!r}"
        )


class StorageError(CPFError):
    """Calculation record store unavailable or write failed."""
