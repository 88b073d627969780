"""Pytest configuration and fixtures for marketplace reservation tests.

This module provides reusable fixtures for testing:
- DynamoDB mocking with moto
- Sample resource, lead, user and reservation items
- Repository and service wiring over mocked tables
"""

import os
from decimal import Decimal
from typing import Any, Callable, Generator

import boto3
import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-marketplace")

# Only set fake credentials for moto if no real credentials are present
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

TABLE_PREFIX = os.environ["DYNAMODB_TABLE_PREFIX"]

STAFF_USER_ID = "staff-001"
RESOURCE_ID = "res-beach-house"
LEAD_ID = "lead-123"


# === DynamoDB Fixtures ===


@pytest.fixture(autouse=True)
def reset_dynamodb_singleton() -> Generator[None, None, None]:
    """Reset DynamoDB singleton before and after each test.

    Tests using mock_aws get a fresh service instance inside the mock
    context rather than reusing one from a previous test.
    """
    from marketplace.services.dynamodb import reset_dynamodb_service

    reset_dynamodb_service()
    yield
    reset_dynamodb_service()


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    if not os.environ.get("AWS_PROFILE"):
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


@pytest.fixture
def dynamodb_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Create a mocked DynamoDB client."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name="eu-west-1")
        yield client


def _simple_table(name: str, key: str) -> dict[str, Any]:
    return {
        "TableName": f"{TABLE_PREFIX}-{name}",
        "KeySchema": [{"AttributeName": key, "KeyType": "HASH"}],
        "AttributeDefinitions": [{"AttributeName": key, "AttributeType": "S"}],
        "BillingMode": "PAY_PER_REQUEST",
    }


@pytest.fixture
def create_tables(dynamodb_client: Any) -> None:
    """Create all required DynamoDB tables for testing."""
    tables = [
        _simple_table("resources", "resource_id"),
        _simple_table("leads", "lead_id"),
        _simple_table("users", "user_id"),
        _simple_table("activity-logs", "log_id"),
        _simple_table("instance-settings", "key"),
        {
            "TableName": f"{TABLE_PREFIX}-reservations",
            "KeySchema": [{"AttributeName": "reservation_id", "KeyType": "HASH"}],
            "AttributeDefinitions": [
                {"AttributeName": "reservation_id", "AttributeType": "S"},
                {"AttributeName": "resource_id", "AttributeType": "S"},
            ],
            "GlobalSecondaryIndexes": [
                {
                    "IndexName": "resource_id-index",
                    "KeySchema": [{"AttributeName": "resource_id", "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                },
            ],
            "BillingMode": "PAY_PER_REQUEST",
        },
    ]

    for table_config in tables:
        dynamodb_client.create_table(**table_config)


@pytest.fixture
def db_service(create_tables: None) -> Any:
    """DynamoDBService bound to the mocked tables."""
    from marketplace.services.dynamodb import get_dynamodb_service

    return get_dynamodb_service("test")


@pytest.fixture
def repository(db_service: Any) -> Any:
    from marketplace.services.repository import ReservationRepository

    return ReservationRepository(db_service)


@pytest.fixture
def seed(create_tables: None) -> Callable[..., None]:
    """Write raw items into a mocked table: seed("resources", item, ...)."""

    def _seed(table: str, *items: dict[str, Any]) -> None:
        dynamodb = boto3.resource("dynamodb", region_name="eu-west-1")
        table_resource = dynamodb.Table(f"{TABLE_PREFIX}-{table}")
        for item in items:
            table_resource.put_item(Item=item)

    return _seed


# === Sample Data Fixtures ===


@pytest.fixture
def sample_staff() -> dict[str, Any]:
    """Enabled staff member allowed to write reservations."""
    return {
        "user_id": STAFF_USER_ID,
        "enabled": True,
        "role": "staff_manager",
        "scopes": [],
        "email": "Staff@Marketplace.Example",
        "name": "Sofia Staff",
    }


@pytest.fixture
def sample_guest_user() -> dict[str, Any]:
    return {
        "user_id": "guest-777",
        "enabled": True,
        "role": "client",
        "email": "Guest@Example.com",
        "first_name": "Gabriel",
        "last_name": "Guest",
        "phone": "+525512345678",
    }


@pytest.fixture
def sample_resource() -> dict[str, Any]:
    """Nightly-priced short-term rental."""
    return {
        "resource_id": RESOURCE_ID,
        "owner_user_id": "owner-001",
        "enabled": True,
        "price": Decimal("50"),
        "pricing_model": "per_night",
        "currency": "MXN",
        "commercial_mode": "rent_short_term",
        "slot_buffer_minutes": Decimal("0"),
        "reservation_count": 0,
    }


@pytest.fixture
def sample_hourly_resource() -> dict[str, Any]:
    """Hourly-rented resource with a 30 minute turnaround buffer."""
    return {
        "resource_id": "res-meeting-room",
        "owner_user_id": "owner-002",
        "enabled": True,
        "price": Decimal("200"),
        "pricing_model": "per_hour",
        "currency": "USD",
        "commercial_mode": "rent_hourly",
        "slot_buffer_minutes": Decimal("30"),
        "reservation_count": 0,
    }


@pytest.fixture
def sample_lead() -> dict[str, Any]:
    """Lead whose metadata carries a requested stay."""
    return {
        "lead_id": LEAD_ID,
        "resource_id": RESOURCE_ID,
        "user_id": "guest-777",
        "enabled": True,
        "status": "new",
        "notes": "Asked about parking",
        "last_message": "Is the house available for the first weekend of March?",
        "meta": {
            "requestSchedule": {
                "scheduleType": "date_range",
                "checkInDate": "2024-03-01",
                "checkOutDate": "2024-03-04",
                "guestName": "Lucia Lead",
                "guestEmail": "Lucia@Example.com",
                "guestCount": Decimal("3"),
            }
        },
    }


@pytest.fixture
def sample_existing_reservation() -> dict[str, Any]:
    """Confirmed stay from 2024-03-02 to 2024-03-05 on the sample resource."""
    return {
        "reservation_id": "RES-2024-EXIST001",
        "resource_id": RESOURCE_ID,
        "booking_type": "date_range",
        "check_in_date": "2024-03-02T00:00:00+00:00",
        "check_out_date": "2024-03-05T00:00:00+00:00",
        "status": "confirmed",
        "enabled": True,
    }
