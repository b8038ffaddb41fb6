"""FastAPI dependencies resolving the collaborators wired in the app lifespan."""

from __future__ import annotations

from fastapi import Request

from cpfcalc.engine.bulk import BulkProcessor
from cpfcalc.engine.service import ContributionService


def get_service(request: Request) -> ContributionService:
    return request.app.state.service


def get_bulk_processor(request: Request) -> BulkProcessor:
    return request.app.state.bulk_processor
