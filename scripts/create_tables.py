"""Create the DynamoDB table backing the calculation record store.

Usage:
    python scripts/create_tables.py --endpoint-url http://localhost:4566 --table-suffix -dev
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3

DEFAULT_TABLE_NAME = "cpf-calculation-records"

# (index name, partition key, sort key); names match the record store
INDEXES = [
    ("ByCalculatedAt", "GSI1PK", "GSI1SK"),
    ("ByBracket", "GSI2PK", "GSI2SK"),
]


def create_tables(ddb: Any, suffix: str = "", table_name: str = DEFAULT_TABLE_NAME) -> bool:
    """Create the record table. Skips if it already exists.

    Returns:
        True if the table was created, False if it was already there.
    """
    client = ddb.meta.client
    full_name = f"{table_name}{suffix}"
    existing = client.list_tables().get("TableNames", [])
    if full_name in existing:
        print(f"  Table {full_name} already exists, skipping")
        return False

    client.create_table(
        TableName=full_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
            *(
                {"AttributeName": attr, "AttributeType": "S"}
                for _, pk, sk in INDEXES
                for attr in (pk, sk)
            ),
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": name,
                "KeySchema": [
                    {"AttributeName": pk, "KeyType": "HASH"},
                    {"AttributeName": sk, "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
            for name, pk, sk in INDEXES
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    print(f"  Created table {full_name}")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Create DynamoDB tables for the CPF calculator")
    parser.add_argument("--endpoint-url", default=None, help="DynamoDB endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--table-suffix", default="", help="Table name suffix (e.g. -dev)")
    parser.add_argument("--table-name", default=DEFAULT_TABLE_NAME, help="Base table name")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    ddb = boto3.resource("dynamodb", **kwargs)

    print("Creating tables...")
    create_tables(ddb, suffix=args.table_suffix, table_name=args.table_name)
    print("Done!")


if __name__ == "__main__":
    main()
