"""Pluggable calculation record stores behind the IRecordStore Protocol."""

from __future__ import annotations

from cpfcalc.core.config import AppSettings
from cpfcalc.persistence.dynamodb_backend import DynamoDBRecordStore
from cpfcalc.persistence.memory_backend import MemoryRecordStore
from cpfcalc.persistence.protocols import IRecordStore


def create_record_store(settings: AppSettings | None = None) -> IRecordStore:
    """Create the record store selected by ``settings.storage_backend``."""
    if settings is None:
        settings = AppSettings()

    if settings.storage_backend == "dynamodb":
        return DynamoDBRecordStore(
            table_name=settings.dynamodb.table_name,
            table_suffix=settings.dynamodb.table_suffix,
            region=settings.dynamodb.region,
            endpoint_url=settings.dynamodb.endpoint_url,
        )

    return MemoryRecordStore()
