"""DynamoDB access for the reservation engine.

Table names are ``<prefix>-<table>``. The prefix comes from
DYNAMODB_TABLE_PREFIX, else ``marketplace-<ENVIRONMENT>``.
"""

import os
from collections.abc import Iterator
from typing import Any

import boto3
from boto3.dynamodb.conditions import ConditionBase, Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

# Module-level singleton for connection reuse
_dynamodb_service_instance: "DynamoDBService | None" = None

_serializer = TypeSerializer()

CONDITION_FAILED = "ConditionalCheckFailedException"
TRANSACTION_CANCELED = "TransactionCanceledException"


def get_dynamodb_service(environment: str | None = None) -> "DynamoDBService":
    """Shared DynamoDBService; ``environment`` only applies on first call."""
    global _dynamodb_service_instance
    if _dynamodb_service_instance is None:
        _dynamodb_service_instance = DynamoDBService(environment)
    return _dynamodb_service_instance


def reset_dynamodb_service() -> None:
    """Drop the singleton so the next call builds fresh boto3 clients (tests)."""
    global _dynamodb_service_instance
    _dynamodb_service_instance = None


def serialize_item(item: dict[str, Any]) -> dict[str, Any]:
    """Low-level attribute-value form of an item, skipping None values."""
    return {
        key: _serializer.serialize(value)
        for key, value in item.items()
        if value is not None
    }


def error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class DynamoDBService:
    """Thin wrapper over the boto3 resource and client for prefixed tables."""

    def __init__(self, environment: str | None = None) -> None:
        """Initialize DynamoDB service.

        Args:
            environment: Deployment stage (dev/prod). Defaults to ENVIRONMENT.
        """
        self.environment = environment or os.getenv("ENVIRONMENT", "dev")
        self.name_prefix = os.getenv(
            "DYNAMODB_TABLE_PREFIX", f"marketplace-{self.environment}"
        )
        self._dynamodb = boto3.resource("dynamodb")
        self._client = boto3.client("dynamodb")

    def table_name(self, table: str) -> str:
        """Physical table name for a logical one."""
        return f"{self.name_prefix}-{table}"

    def _table(self, table: str) -> Any:
        return self._dynamodb.Table(self.table_name(table))

    def get_item(self, table: str, key: dict[str, Any]) -> dict[str, Any] | None:
        """Fetch one item by primary key; None when absent."""
        item: dict[str, Any] | None = self._table(table).get_item(Key=key).get("Item")
        return item

    def put_item(self, table: str, item: dict[str, Any]) -> None:
        self._table(table).put_item(Item=item)

    def update_item(
        self,
        table: str,
        key: dict[str, Any],
        update_expression: str,
        values: dict[str, Any],
        names: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Apply an update expression and return the item's new attributes.

        Args:
            table: Logical table name
            key: Primary key
            update_expression: e.g. ``"SET #status = :status"``
            values: ExpressionAttributeValues
            names: ExpressionAttributeNames, for reserved words like ``status``
        """
        kwargs: dict[str, Any] = {
            "Key": key,
            "UpdateExpression": update_expression,
            "ExpressionAttributeValues": values,
            "ReturnValues": "ALL_NEW",
        }
        if names:
            kwargs["ExpressionAttributeNames"] = names
        attributes: dict[str, Any] = self._table(table).update_item(**kwargs).get(
            "Attributes", {}
        )
        return attributes

    def _pages(self, table: str, **kwargs: Any) -> Iterator[list[dict[str, Any]]]:
        table_resource = self._table(table)
        while True:
            response = table_resource.query(**kwargs)
            yield response.get("Items", [])
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return
            kwargs["ExclusiveStartKey"] = last_key

    def query_index(
        self,
        table: str,
        index_name: str,
        partition_key: str,
        value: str,
        filter_expression: ConditionBase | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Query a GSI by partition key, following pages.

        ``limit`` caps the number of matching items returned (applied after
        the filter expression, unlike DynamoDB's own Limit).
        """
        kwargs: dict[str, Any] = {
            "IndexName": index_name,
            "KeyConditionExpression": Key(partition_key).eq(value),
        }
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items: list[dict[str, Any]] = []
        for page in self._pages(table, **kwargs):
            items.extend(page)
            if limit and len(items) >= limit:
                return items[:limit]
        return items

    def transact_write(self, items: list[dict[str, Any]]) -> bool:
        """Run a write transaction.

        Args:
            items: TransactWriteItem dicts in low-level format

        Returns:
            True when committed, False when a condition cancelled it
        """
        try:
            self._client.transact_write_items(TransactItems=items)  # type: ignore[arg-type]
        except ClientError as e:
            if error_code(e) in (TRANSACTION_CANCELED, CONDITION_FAILED):
                return False
            raise
        return True
