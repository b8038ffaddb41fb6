"""CPF calculation, history and rate endpoints."""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query

from cpfcalc.api.dependencies import get_bulk_processor, get_service
from cpfcalc.api.schemas import BulkCalculationBody, RateUpdateBody
from cpfcalc.core.exceptions import RecordNotFoundError
from cpfcalc.engine.bulk import BulkProcessor
from cpfcalc.engine.service import ContributionService
from cpfcalc.models.contribution import CalculationRecord, CalculationRequest

router = APIRouter(tags=["cpf"])


def _records(records: list[CalculationRecord]) -> list[dict[str, Any]]:
    return [r.model_dump(mode="json", by_alias=True) for r in records]


@router.post("/calculate")
def calculate(body: CalculationRequest, service: ContributionService = Depends(get_service)) -> dict:
    """Calculate one employee's contribution and store the record."""
    record = service.calculate_and_save(body)
    return {"success": True, "data": record.calculations.model_dump(mode="json", by_alias=True)}


@router.post("/preview")
def preview(body: CalculationRequest, service: ContributionService = Depends(get_service)) -> dict:
    """Calculate without storing anything."""
    result = service.calculate(body)
    return {"success": True, "data": result.model_dump(mode="json", by_alias=True)}


@router.post("/calculate-bulk")
async def calculate_bulk(
    body: BulkCalculationBody,
    processor: BulkProcessor = Depends(get_bulk_processor),
) -> dict:
    result = await processor.process_batch(body.employees)
    return {
        "success": True,
        "data": {
            "summary": {
                "totalProcessed": result.total_processed,
                "successfulCount": result.successful_count,
                "failedCount": result.failed_count,
            },
            "successes": _records(result.successes),
            "failures": [f.model_dump(mode="json", by_alias=True) for f in result.failures],
        },
    }


@router.get("/history/{employee_id}")
def get_history(
    employee_id: str,
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    service: ContributionService = Depends(get_service),
) -> dict:
    """Return an employee's records, newest first."""
    records = service.get_history(employee_id, start_date, end_date)
    if not records:
        raise RecordNotFoundError(employee_id)
    return {"success": True, "data": _records(records)}


@router.get("/allCPF")
def get_all(service: ContributionService = Depends(get_service)) -> dict:
    return {"success": True, "data": _records(service.list_all())}


@router.post("/update-rates")
def update_rates(body: RateUpdateBody, service: ContributionService = Depends(get_service)) -> dict:
    entry = service.update_rates(body.citizenship, body.age_group, body.employee_share, body.employer_share)
    return {
        "success": True,
        "message": "CPF rates updated successfully",
        "data": entry.model_dump(mode="json", by_alias=True),
    }


@router.get("/rates")
def get_rates(service: ContributionService = Depends(get_service)) -> dict:
    """Return the full active rate table, keyed by citizenship then age group."""
    table: dict[str, dict[str, Any]] = {}
    for (citizenship, age_group), entry in service.rate_table().items():
        table.setdefault(citizenship.value, {})[age_group.value] = entry.model_dump(mode="json", by_alias=True)
    return {"success": True, "data": table}
