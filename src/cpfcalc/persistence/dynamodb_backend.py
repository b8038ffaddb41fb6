"""DynamoDB backend implementing IRecordStore.

Item layout (one item per calculation):

    PK     = "EMPLOYEE#{employeeId}"
    SK     = "CALC#{calculatedAt ISO-8601 UTC}#{recordId}"
    GSI1PK = "CALC"                            (index ByCalculatedAt)
    GSI1SK = "{calculatedAt}#{recordId}"
    GSI2PK = "{citizenship}#{ageGroup}"        (index ByBracket)
    GSI2SK = "{calculatedAt}#{recordId}"
    seq    = append order (nanosecond clock), used to keep equal timestamps stable
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal, DecimalException
from typing import Any

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from cpfcalc.core.exceptions import StorageError
from cpfcalc.models.contribution import CalculationRecord, NewCalculationRecord
from cpfcalc.persistence.records import new_record_id, newest_first, utcnow

_AMOUNT_FIELDS = ("basicSalary", "bonus", "additionalWages")
_RESULT_FIELDS = (
    "employeeContribution",
    "employerContribution",
    "totalContribution",
    "grossSalary",
    "netSalary",
)

BY_CALCULATED_AT_INDEX = "ByCalculatedAt"
BY_BRACKET_INDEX = "ByBracket"
_ALL_RECORDS_PK = "CALC"


def _pk(employee_id: str) -> str:
    return f"EMPLOYEE#{employee_id}"


def _sk(calculated_at: datetime, record_id: str) -> str:
    return f"CALC#{_time_key(calculated_at, record_id)}"


def _time_key(calculated_at: datetime, record_id: str) -> str:
    return f"{calculated_at.isoformat()}#{record_id}"


def _to_item(record: CalculationRecord, seq: int) -> dict[str, Any]:
    """Encode a record as a DynamoDB item. Amounts stay Decimal."""
    salary = record.salary_details
    result = record.calculations
    return {
        "PK": _pk(record.employee_id),
        "SK": _sk(record.calculated_at, record.record_id),
        "GSI1PK": _ALL_RECORDS_PK,
        "GSI1SK": _time_key(record.calculated_at, record.record_id),
        "GSI2PK": f"{record.citizenship.value}#{record.age_group.value}",
        "GSI2SK": _time_key(record.calculated_at, record.record_id),
        "seq": seq,
        "recordId": record.record_id,
        "employeeId": record.employee_id,
        "citizenship": record.citizenship.value,
        "ageGroup": record.age_group.value,
        "salaryDetails": {
            "basicSalary": salary.basic_salary,
            "bonus": salary.bonus,
            "additionalWages": salary.additional_wages,
        },
        "calculations": {
            "employeeContribution": result.employee_contribution,
            "employerContribution": result.employer_contribution,
            "totalContribution": result.total_contribution,
            "grossSalary": result.gross_salary,
            "netSalary": result.net_salary,
        },
        "calculatedAt": record.calculated_at.isoformat(),
    }


def _from_item(item: dict[str, Any]) -> CalculationRecord:
    return CalculationRecord.model_validate({
        "recordId": item["recordId"],
        "employeeId": item["employeeId"],
        "citizenship": item["citizenship"],
        "ageGroup": item["ageGroup"],
        "salaryDetails": {k: Decimal(item["salaryDetails"][k]) for k in _AMOUNT_FIELDS},
        "calculations": {k: Decimal(item["calculations"][k]) for k in _RESULT_FIELDS},
        "calculatedAt": datetime.fromisoformat(item["calculatedAt"]),
    })


def _records(items: list[dict[str, Any]]) -> list[CalculationRecord]:
    """Decode items in append order, then order newest first."""
    ordered = sorted(items, key=lambda i: int(i.get("seq", 0)))
    return newest_first(_from_item(i) for i in ordered)


class DynamoDBRecordStore:
    """Production IRecordStore backed by DynamoDB.

    boto3 resources are not thread-safe, so each worker thread gets its own.
    """

    def __init__(self, table_name: str = "cpf-calculation-records", table_suffix: str = "",
                 region: str = "us-east-1", endpoint_url: str | None = None,
                 clock: Callable[[], datetime] = utcnow) -> None:
        self._table_name = f"{table_name}{table_suffix}"
        self._region = region
        self._endpoint_url = endpoint_url
        self._clock = clock
        self._local = threading.local()
        self._seq_lock = threading.Lock()
        self._last_seq = 0

    def _next_seq(self) -> int:
        """Strictly increasing within this process, close to wall-clock ns across processes."""
        with self._seq_lock:
            self._last_seq = max(time.time_ns(), self._last_seq + 1)
            return self._last_seq

    @property
    def table_name(self) -> str:
        return self._table_name

    def _table(self):
        table = getattr(self._local, "table", None)
        if table is None:
            kwargs: dict = {"region_name": self._region}
            if self._endpoint_url:
                kwargs["endpoint_url"] = self._endpoint_url
            ddb = boto3.session.Session().resource("dynamodb", **kwargs)
            table = self._local.table = ddb.Table(self._table_name)
        return table

    # ---- IRecordStore methods ----

    def append(self, record: NewCalculationRecord) -> CalculationRecord:
        stored = CalculationRecord(
            **dict(record),
            record_id=new_record_id(),
            calculated_at=self._clock().astimezone(UTC),
        )
        try:
            self._table().put_item(Item=_to_item(stored, self._next_seq()))
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(
                f"DynamoDB put failed for employee_id={record.employee_id!r}: {exc}"
            ) from exc
        except (DecimalException, TypeError) as exc:
            # boto3's TypeSerializer rejects numbers outside DynamoDB's 38-digit range
            raise StorageError(
                f"Record for employee_id={record.employee_id!r} cannot be stored in DynamoDB: {exc!r}"
            ) from exc
        return stored

    def query_by_employee(
        self,
        employee_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[CalculationRecord]:
        condition = Key("PK").eq(_pk(employee_id))
        # "~" sorts after every character of an ISO timestamp, so it closes the end day
        if start_date is not None and end_date is not None:
            condition &= Key("SK").between(f"CALC#{start_date.isoformat()}", f"CALC#{end_date.isoformat()}~")
        elif start_date is not None:
            condition &= Key("SK").gte(f"CALC#{start_date.isoformat()}")
        elif end_date is not None:
            condition &= Key("SK").lt(f"CALC#{(end_date + timedelta(days=1)).isoformat()}")
        else:
            condition &= Key("SK").begins_with("CALC#")

        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {"KeyConditionExpression": condition}
        try:
            while True:
                resp = self._table().query(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB query failed for employee_id={employee_id!r}: {exc}") from exc
        return _records(items)

    def query_all(self) -> list[CalculationRecord]:
        items: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {
            "IndexName": BY_CALCULATED_AT_INDEX,
            "KeyConditionExpression": Key("GSI1PK").eq(_ALL_RECORDS_PK),
            "ScanIndexForward": False,
        }
        try:
            while True:
                resp = self._table().query(**kwargs)
                items.extend(resp.get("Items", []))
                if "LastEvaluatedKey" not in resp:
                    break
                kwargs["ExclusiveStartKey"] = resp["LastEvaluatedKey"]
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"DynamoDB index query failed on {self._table_name!r}: {exc}") from exc
        return _records(items)
