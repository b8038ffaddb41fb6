"""Tests for the DynamoDB table provisioning script."""

from __future__ import annotations

import sys
from pathlib import Path

import boto3
import pytest
from moto import mock_aws

from cpfcalc.persistence.dynamodb_backend import BY_BRACKET_INDEX, BY_CALCULATED_AT_INDEX

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from create_tables import create_tables  # noqa: E402


@pytest.fixture
def ddb():
    with mock_aws():
        yield boto3.resource("dynamodb", region_name="us-east-1")


class TestCreateTables:
    def test_creates_record_table(self, ddb):
        assert create_tables(ddb, suffix="-test") is True
        client = boto3.client("dynamodb", region_name="us-east-1")
        assert client.list_tables()["TableNames"] == ["cpf-calculation-records-test"]

    def test_key_schema(self, ddb):
        create_tables(ddb, suffix="-test")
        table = ddb.Table("cpf-calculation-records-test")
        keys = {k["AttributeName"]: k["KeyType"] for k in table.key_schema}
        assert keys == {"PK": "HASH", "SK": "RANGE"}

    def test_secondary_indexes_match_record_store(self, ddb):
        create_tables(ddb, suffix="-test")
        table = ddb.Table("cpf-calculation-records-test")
        indexes = {
            gsi["IndexName"]: [k["AttributeName"] for k in gsi["KeySchema"]]
            for gsi in table.global_secondary_indexes
        }
        assert indexes == {
            BY_CALCULATED_AT_INDEX: ["GSI1PK", "GSI1SK"],
            BY_BRACKET_INDEX: ["GSI2PK", "GSI2SK"],
        }

    def test_idempotent_skips_existing(self, ddb):
        create_tables(ddb, suffix="-test")
        assert create_tables(ddb, suffix="-test") is False
        client = boto3.client("dynamodb", region_name="us-east-1")
        assert len(client.list_tables()["TableNames"]) == 1

    def test_custom_table_name(self, ddb):
        create_tables(ddb, table_name="cpf-records")
        client = boto3.client("dynamodb", region_name="us-east-1")
        assert client.list_tables()["TableNames"] == ["cpf-records"]
