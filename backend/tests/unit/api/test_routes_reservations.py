"""Unit tests for manual reservation API routes.

Tests for:
- POST /api/reservations/manual - Create manual reservation
- GET /api/ping - Health check
- Error envelope and HTTP status mapping
"""

from decimal import Decimal
from typing import Any, Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from starlette.status import (
    HTTP_200_OK,
    HTTP_201_CREATED,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from marketplace.models.errors import ErrorCode
from marketplace.models.reservation import ExistingReservation
from marketplace.models.resource import InstanceSettings, Resource, UserProfile
from marketplace.services.manual_reservation import ManualReservationService
from marketplace_api.dependencies import get_manual_reservation_service
from marketplace_api.exceptions import ERROR_CODE_TO_HTTP_STATUS
from marketplace_api.main import app, cors_origins

STAFF_ID = "staff-001"
URL = "/api/reservations/manual"


@pytest.fixture
def repository() -> MagicMock:
    repo = MagicMock()
    repo.get_instance_settings.return_value = InstanceSettings()
    staff = UserProfile(user_id=STAFF_ID, role="owner", email="owner@example.com")
    repo.get_user_profile.side_effect = lambda user_id: staff if user_id == STAFF_ID else None
    repo.get_resource.return_value = Resource.model_validate(
        {
            "resource_id": "res-1",
            "enabled": True,
            "price": Decimal("50"),
            "pricing_model": "per_night",
            "currency": "MXN",
            "commercial_mode": "rent_short_term",
        }
    )
    repo.get_lead.return_value = None
    repo.list_blocking_candidates.return_value = []
    repo.create_reservation.return_value = "RES-2024-0000ABCD"
    repo.write_activity_log.return_value = True
    return repo


@pytest.fixture
def client(repository: MagicMock) -> Generator[TestClient, None, None]:
    """Test client with the service wired to a mocked repository."""
    app.dependency_overrides[get_manual_reservation_service] = (
        lambda: ManualReservationService(repository)
    )
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def _post(client: TestClient, body: dict[str, Any], actor: str | None = STAFF_ID) -> Any:
    headers = {"x-user-sub": actor} if actor else {}
    return client.post(URL, json=body, headers=headers)


STAY = {"resourceId": "res-1", "checkInDate": "2024-03-01", "checkOutDate": "2024-03-04"}


class TestCreateManualReservation:
    """Tests for POST /api/reservations/manual."""

    def test_returns_201_with_summary(self, client: TestClient) -> None:
        response = _post(client, STAY)
        assert response.status_code == HTTP_201_CREATED

        body = response.json()
        assert body["success"] is True
        assert body["code"] == "RESERVATION_CREATED_MANUAL"
        data = body["data"]
        assert data["reservation_id"] == "RES-2024-0000ABCD"
        assert data["resource_id"] == "res-1"
        assert data["lead_id"] is None
        assert data["booking_type"] == "date_range"
        assert data["schedule_type"] == "date_range"
        assert data["status"] == "pending"
        assert data["payment_status"] == "pending"
        assert data["payment_provider"] == "manual"
        assert data["total_amount"] == 150.0
        assert data["currency"] == "MXN"

    def test_accepts_snake_case_fields(self, client: TestClient) -> None:
        response = _post(
            client,
            {
                "resource_id": "res-1",
                "check_in_date": "2024-03-01",
                "check_out_date": "2024-03-02",
                "total_amount": "80",
            },
        )
        assert response.status_code == HTTP_201_CREATED
        assert response.json()["data"]["total_amount"] == 80.0

    def test_unsupported_booking_type_falls_back(self, client: TestClient) -> None:
        response = _post(client, {**STAY, "bookingType": "auction"})
        assert response.status_code == HTTP_201_CREATED
        assert response.json()["data"]["booking_type"] == "date_range"

    def test_numeric_text_fields_are_accepted(self, client: TestClient) -> None:
        response = _post(client, {**STAY, "guestPhone": 5551234, "externalRef": 42})
        assert response.status_code == HTTP_201_CREATED

    def test_correlation_id_is_recorded_and_echoed(
        self, client: TestClient, repository: MagicMock
    ) -> None:
        response = client.post(
            URL,
            json=STAY,
            headers={"x-user-sub": STAFF_ID, "X-Request-ID": "req-abc"},
        )
        assert response.status_code == HTTP_201_CREATED
        assert response.headers["X-Correlation-ID"] == "req-abc"
        entry = repository.write_activity_log.call_args.args[0]
        assert entry.request_id == "req-abc"

    def test_missing_actor_is_401(self, client: TestClient) -> None:
        response = _post(client, STAY, actor=None)
        assert response.status_code == HTTP_401_UNAUTHORIZED
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "AUTH_REQUIRED"
        assert body["recovery"]

    def test_unknown_actor_is_403(self, client: TestClient) -> None:
        response = _post(client, STAY, actor="someone-else")
        assert response.status_code == HTTP_403_FORBIDDEN
        assert response.json()["error_code"] == "FORBIDDEN"

    def test_missing_resource_is_404(self, client: TestClient, repository: MagicMock) -> None:
        repository.get_resource.return_value = None
        response = _post(client, STAY)
        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.json()["details"] == {"resource_id": "res-1"}

    def test_conflict_is_409(self, client: TestClient, repository: MagicMock) -> None:
        repository.list_blocking_candidates.return_value = [
            ExistingReservation(
                reservation_id="RES-OLD",
                booking_type="date_range",
                status="pending",
                check_in_date="2024-03-02",
                check_out_date="2024-03-03",
            )
        ]
        response = _post(client, STAY)
        assert response.status_code == HTTP_409_CONFLICT
        assert response.json()["error_code"] == "RESERVATION_CONFLICT"

    @pytest.mark.parametrize(
        ("body", "code"),
        [
            ({"resourceId": "res-1", "checkInDate": "2024-03-01"}, "DATE_RANGE_REQUIRED"),
            ({**STAY, "checkOutDate": "2024-02-01"}, "DATE_RANGE_INVALID"),
            ({**STAY, "taxAmount": "-1"}, "AMOUNT_INVALID"),
            ({**STAY, "currency": "GBP"}, "CURRENCY_NOT_SUPPORTED"),
            ({"checkInDate": "2024-03-01"}, "VALIDATION_ERROR"),
        ],
    )
    def test_validation_failures_are_422(
        self, client: TestClient, body: dict[str, Any], code: str
    ) -> None:
        response = _post(client, body)
        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error_code"] == code

    def test_malformed_body_is_validation_error(self, client: TestClient) -> None:
        response = _post(client, {**STAY, "closeLead": {"not": "a bool"}})
        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_unexpected_exception_is_500(
        self, client: TestClient, repository: MagicMock
    ) -> None:
        repository.list_blocking_candidates.side_effect = RuntimeError("kaboom")
        response = _post(client, STAY)
        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["error_code"] == "INTERNAL_ERROR"
        assert "kaboom" not in response.text


class TestErrorMapping:
    def test_every_error_code_has_a_status(self) -> None:
        assert set(ERROR_CODE_TO_HTTP_STATUS) == set(ErrorCode)


class TestPing:
    def test_ping(self) -> None:
        response = TestClient(app).get("/api/ping")
        assert response.status_code == HTTP_200_OK
        assert response.json()["status"] == "ok"


class TestAppWiring:
    def test_correlation_id_generated_when_absent(self) -> None:
        response = TestClient(app).get("/api/ping")
        assert response.headers["X-Correlation-ID"]

    def test_correlation_header_wins_over_request_id(self) -> None:
        response = TestClient(app).get(
            "/api/ping",
            headers={"X-Correlation-ID": "corr-1", "X-Request-ID": "req-1"},
        )
        assert response.headers["X-Correlation-ID"] == "corr-1"

    def test_cors_origins_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://admin.example.com, ,https://x.example")
        assert cors_origins() == ["https://admin.example.com", "https://x.example"]
