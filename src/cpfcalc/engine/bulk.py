"""BulkProcessor: calculate and save a batch of employees concurrently.

Each entry is validated, calculated and persisted on its own. A failure in
one entry is recorded as a BulkFailure and never stops the others; the batch
is only rejected as a whole when its size is out of bounds.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from typing import Any

from cpfcalc.core.exceptions import ConfigurationError, CPFError, ValidationError
from cpfcalc.core.logging_config import get_logger
from cpfcalc.engine.service import ContributionService, to_request
from cpfcalc.models.bulk import BulkFailure, BulkResult
from cpfcalc.models.contribution import CalculationRecord, CalculationRequest

logger = get_logger("engine.bulk")

DEFAULT_MAX_BATCH_SIZE = 1000
DEFAULT_MAX_CONCURRENCY = 16

BulkEntry = CalculationRequest | Mapping[str, Any]


def _employee_id_of(entry: Any) -> str:
    if isinstance(entry, CalculationRequest):
        return entry.employee_id
    if isinstance(entry, Mapping):
        value = entry.get("employeeId", entry.get("employee_id"))
        return "" if value is None else str(value)
    return ""


class BulkProcessor:
    """Fan out per-employee calculate+save work, then partition the outcomes."""

    def __init__(
        self,
        service: ContributionService,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        self._service = service
        self._max_batch_size = max_batch_size
        self._max_concurrency = max(1, max_concurrency)

    @property
    def max_batch_size(self) -> int:
        return self._max_batch_size

    async def process_batch(
        self,
        requests: Sequence[BulkEntry],
        max_batch_size: int | None = None,
    ) -> BulkResult:
        limit = self._max_batch_size if max_batch_size is None else max_batch_size
        if isinstance(requests, (str, bytes)) or not isinstance(requests, Sequence):
            raise ValidationError("employees: must be a list", field="employees")
        if not 1 <= len(requests) <= limit:
            raise ValidationError(
                f"employees: batch size must be between 1 and {limit}, got {len(requests)}",
                field="employees",
            )

        semaphore = asyncio.Semaphore(self._max_concurrency)
        outcomes = await asyncio.gather(
            *(self._process_one(index, entry, semaphore) for index, entry in enumerate(requests))
        )

        result = BulkResult(
            successes=[o for o in outcomes if isinstance(o, CalculationRecord)],
            failures=[o for o in outcomes if isinstance(o, BulkFailure)],
        )
        logger.info(
            "CPF bulk calculation finished",
            extra={
                "total_processed": result.total_processed,
                "successful_count": result.successful_count,
                "failed_count": result.failed_count,
            },
        )
        return result

    async def _process_one(
        self,
        index: int,
        entry: BulkEntry,
        semaphore: asyncio.Semaphore,
    ) -> CalculationRecord | BulkFailure:
        employee_id = _employee_id_of(entry)
        try:
            request = to_request(entry)
            async with semaphore:
                return await asyncio.to_thread(self._service.calculate_and_save, request)
        except ConfigurationError as exc:
            logger.exception("Rate table lookup failed", extra={"index": index, "employee_id": employee_id})
            return BulkFailure(index=index, employee_id=employee_id, reason=str(exc))
        except CPFError as exc:
            logger.warning(
                "CPF bulk entry failed",
                extra={"index": index, "employee_id": employee_id, "reason": str(exc)},
            )
            return BulkFailure(index=index, employee_id=employee_id, reason=str(exc))
