"""Tests for ContributionService."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from cpfcalc.core.exceptions import StorageError, ValidationError
from cpfcalc.engine.rate_table import RateTable
from cpfcalc.engine.service import ContributionService
from cpfcalc.models.contribution import CalculationRequest
from cpfcalc.models.rates import AgeGroup, CitizenshipStatus
from tests.fakes import FailingRecordStore, FixedClock, MemoryRecordStore


def _payload(employee_id="EMP001", citizenship="CITIZEN", age_group="BELOW_55", basic=5000, **extra):
    return {
        "employeeId": employee_id,
        "citizenship": citizenship,
        "ageGroup": age_group,
        "salaryDetails": {"basicSalary": basic, **extra},
    }


@pytest.fixture
def clock():
    return FixedClock(step=timedelta(days=1))


@pytest.fixture
def store(clock):
    return MemoryRecordStore(clock=clock)


@pytest.fixture
def service(store):
    return ContributionService(RateTable(), store)


class TestCalculate:
    def test_does_not_persist(self, service, store):
        result = service.calculate(_payload())
        assert result.total_contribution == Decimal("1850")
        assert store.query_all() == []

    def test_accepts_request_model(self, service):
        request = CalculationRequest.model_validate(_payload(basic=8000))
        assert service.calculate(request).employee_contribution == Decimal("1200")

    def test_invalid_input_raises_validation_error(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.calculate(_payload(basic=0))
        assert "basicSalary" in str(exc_info.value)

    def test_unknown_enum_raises_validation_error(self, service):
        with pytest.raises(ValidationError):
            service.calculate(_payload(citizenship="TOURIST"))

    def test_non_mapping_raises_validation_error(self, service):
        with pytest.raises(ValidationError):
            service.calculate(["EMP001", "CITIZEN"])


class TestCalculateAndSave:
    def test_persists_record(self, service, store):
        record = service.calculate_and_save(_payload())
        assert record.record_id
        assert record.calculated_at == datetime(2024, 3, 15, 9, 30, tzinfo=UTC)
        assert record.calculations.net_salary == Decimal("4000")
        assert store.query_all() == [record]

    def test_stored_record_cannot_be_rewritten(self, service, store):
        record = service.calculate_and_save(_payload())
        with pytest.raises(PydanticValidationError):
            record.calculations.net_salary = Decimal("0")
        with pytest.raises(PydanticValidationError):
            record.salary_details.basic_salary = Decimal("1")
        stored = store.query_all()[0]
        assert stored.calculations.net_salary == Decimal("4000")
        assert stored.salary_details.basic_salary == Decimal("5000")

    def test_invalid_input_persists_nothing(self, service, store):
        with pytest.raises(ValidationError):
            service.calculate_and_save(_payload(basic=-1))
        assert store.query_all() == []

    def test_storage_error_propagates(self):
        service = ContributionService(RateTable(), FailingRecordStore(fail_all=True))
        with pytest.raises(StorageError):
            service.calculate_and_save(_payload())

    def test_rate_update_is_not_retroactive(self, service):
        before = service.calculate_and_save(_payload())
        service.update_rates("CITIZEN", "BELOW_55", "0.1", "0.1")
        after = service.calculate_and_save(_payload())

        history = service.get_history("EMP001")
        assert [r.record_id for r in history] == [after.record_id, before.record_id]
        assert history[1].calculations.total_contribution == Decimal("1850")
        assert history[0].calculations.total_contribution == Decimal("1000")


class TestHistory:
    def test_filters_by_inclusive_dates(self, service):
        for _ in range(4):  # 15th, 16th, 17th, 18th March
            service.calculate_and_save(_payload())
        service.calculate_and_save(_payload(employee_id="EMP002"))

        records = service.get_history("EMP001", date(2024, 3, 16), date(2024, 3, 17))
        assert [r.calculated_at.day for r in records] == [17, 16]

    def test_newest_first(self, service):
        for _ in range(3):
            service.calculate_and_save(_payload())
        days = [r.calculated_at.day for r in service.get_history("EMP001")]
        assert days == [17, 16, 15]

    def test_unknown_employee_returns_empty(self, service):
        assert service.get_history("NOBODY") == []

    def test_inverted_range_rejected(self, service):
        with pytest.raises(ValidationError):
            service.get_history("EMP001", date(2024, 3, 20), date(2024, 3, 1))

    def test_list_all(self, service):
        service.calculate_and_save(_payload())
        service.calculate_and_save(_payload(employee_id="EMP002"))
        assert {r.employee_id for r in service.list_all()} == {"EMP001", "EMP002"}


class TestRates:
    def test_update_then_get(self, service):
        service.update_rates(CitizenshipStatus.CITIZEN, AgeGroup.ABOVE_70, 0.06, 0.08)
        entry = service.get_rates("CITIZEN", "ABOVE_70")
        assert entry.employee_share == Decimal("0.06")
        assert entry.employer_share == Decimal("0.08")
        assert entry.total_rate == Decimal("0.14")

    @pytest.mark.parametrize(("employee", "employer"), [(-0.1, 0.1), (0.1, 1.5), ("abc", 0.1), (None, 0.1)])
    def test_rejects_out_of_range_shares(self, service, employee, employer):
        with pytest.raises(ValidationError):
            service.update_rates("CITIZEN", "BELOW_55", employee, employer)
        assert service.get_rates("CITIZEN", "BELOW_55").total_rate == Decimal("0.37")

    def test_rejects_unknown_bracket(self, service):
        with pytest.raises(ValidationError):
            service.update_rates("CITIZEN", "ABOVE_99", 0.1, 0.1)

    def test_accepts_boundary_shares(self, service):
        entry = service.update_rates("FOREIGNER", "BELOW_55", 0, 1)
        assert entry.total_rate == Decimal("1")

    def test_rate_table_snapshot(self, service):
        assert len(service.rate_table()) == 10
