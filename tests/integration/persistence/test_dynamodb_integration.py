"""Integration tests for DynamoDBRecordStore against LocalStack."""

from __future__ import annotations

import asyncio
import uuid
from decimal import Decimal

import pytest

from cpfcalc.engine.bulk import BulkProcessor
from cpfcalc.engine.rate_table import RateTable
from cpfcalc.engine.service import ContributionService
from cpfcalc.persistence.dynamodb_backend import DynamoDBRecordStore


class TestDynamoDBIntegration:
    @pytest.fixture
    def store(self, record_table, localstack_ddb):
        return DynamoDBRecordStore(
            table_suffix=record_table,
            region="us-east-1",
            endpoint_url=localstack_ddb.meta.client.meta.endpoint_url,
        )

    @pytest.fixture
    def employee_id(self):
        return f"INT-{uuid.uuid4().hex[:8]}"

    def test_calculate_and_read_back(self, store, employee_id):
        service = ContributionService(RateTable(), store)
        service.calculate_and_save({
            "employeeId": employee_id,
            "citizenship": "CITIZEN",
            "ageGroup": "BELOW_55",
            "salaryDetails": {"basicSalary": 5000},
        })
        history = service.get_history(employee_id)
        assert len(history) == 1
        assert history[0].calculations.employee_contribution == Decimal("1000")

    def test_bulk_appends_in_parallel(self, store, employee_id):
        processor = BulkProcessor(ContributionService(RateTable(), store), max_concurrency=8)
        entries = [
            {
                "employeeId": employee_id,
                "citizenship": "CITIZEN",
                "ageGroup": "60_TO_65",
                "salaryDetails": {"basicSalary": 1000 + i},
            }
            for i in range(20)
        ]
        result = asyncio.run(processor.process_batch(entries))
        assert result.successful_count == 20
        assert len(store.query_by_employee(employee_id)) == 20
