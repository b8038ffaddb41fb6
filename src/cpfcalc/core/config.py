"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings


class DynamoDBConfig(BaseSettings):
    """DynamoDB configuration for the calculation record store."""

    model_config = {"env_prefix": "CPF_DYNAMO_"}

    table_name: str = "cpf-calculation-records"
    table_suffix: str = ""  # "-dev", "-uat", or "" for prod
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class BulkConfig(BaseSettings):
    """Bulk calculation limits."""

    model_config = {"env_prefix": "CPF_BULK_"}

    max_batch_size: int = 1000
    max_concurrency: int = 16


class CalculationConfig(BaseSettings):
    """Wage ceilings applied before the contribution rate."""

    model_config = {"env_prefix": "CPF_CALC_"}

    ordinary_wage_ceiling: Decimal = Decimal("6000")
    additional_wage_ceiling: Decimal = Decimal("102000")


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "CPF_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = False
    storage_backend: Literal["memory", "dynamodb"] = "memory"

    dynamodb: DynamoDBConfig = DynamoDBConfig()
    bulk: BulkConfig = BulkConfig()
    calculation: CalculationConfig = CalculationConfig()
