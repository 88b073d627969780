"""Unit tests for ReservationRepository against moto-mocked DynamoDB."""

import datetime as dt
from decimal import Decimal
from typing import Any, Callable

import boto3
import pytest

from marketplace.models.enums import (
    BookingType,
    CommercialMode,
    Currency,
    ScheduleType,
)
from marketplace.models.reservation import (
    ActivityLogEntry,
    MoneyAmounts,
    ReservationRecord,
)
from marketplace.models.resource import DEFAULT_ENABLED_MODULES, Lead
from marketplace.services.repository import ReservationRepository, merge_lead_notes

TABLE_PREFIX = "test-marketplace"


def _table(name: str) -> Any:
    return boto3.resource("dynamodb", region_name="eu-west-1").Table(
        f"{TABLE_PREFIX}-{name}"
    )


def _record(resource_id: str = "res-beach-house", **overrides: Any) -> ReservationRecord:
    check_in = dt.datetime(2024, 3, 1, tzinfo=dt.UTC)
    data: dict[str, Any] = {
        "resource_id": resource_id,
        "resource_owner_user_id": "owner-001",
        "guest_user_id": "guest-777",
        "guest_name": "Gabriel Guest",
        "guest_email": "guest@example.com",
        "commercial_mode": CommercialMode.RENT_SHORT_TERM,
        "booking_type": BookingType.DATE_RANGE,
        "schedule_type": ScheduleType.DATE_RANGE,
        "check_in_date": check_in,
        "check_out_date": check_in + dt.timedelta(days=3),
        "guest_count": 2,
        "units": 1,
        "nights": 3,
        "amounts": MoneyAmounts(base=Decimal("150.00"), total=Decimal("150.00")),
        "currency": Currency.MXN,
        "created_at": dt.datetime(2024, 2, 1, 12, tzinfo=dt.UTC),
    }
    data.update(overrides)
    return ReservationRecord(**data)


class TestLookups:
    def test_get_resource(
        self,
        repository: ReservationRepository,
        seed: Callable[..., None],
        sample_resource: dict[str, Any],
    ) -> None:
        seed("resources", sample_resource)
        resource = repository.get_resource("res-beach-house")
        assert resource is not None
        assert resource.price == Decimal("50")
        assert resource.booking_version == 0
        assert repository.get_resource("missing") is None

    def test_get_lead_and_user(
        self,
        repository: ReservationRepository,
        seed: Callable[..., None],
        sample_lead: dict[str, Any],
        sample_staff: dict[str, Any],
    ) -> None:
        seed("leads", sample_lead)
        seed("users", sample_staff)
        lead = repository.get_lead("lead-123")
        assert lead is not None
        assert lead.schedule().guest_name == "Lucia Lead"
        profile = repository.get_user_profile("staff-001")
        assert profile is not None
        assert profile.normalized_role == "staff_manager"

    def test_instance_settings_default_when_missing(
        self, repository: ReservationRepository
    ) -> None:
        settings = repository.get_instance_settings()
        assert settings.enabled
        assert settings.enabled_modules == list(DEFAULT_ENABLED_MODULES)

    def test_empty_module_list_means_defaults(
        self, repository: ReservationRepository, seed: Callable[..., None]
    ) -> None:
        seed("instance-settings", {"key": "main", "enabled": True, "enabled_modules": []})
        assert repository.get_instance_settings().is_module_enabled("module.resources")

    def test_stored_module_list(
        self, repository: ReservationRepository, seed: Callable[..., None]
    ) -> None:
        seed(
            "instance-settings",
            {"key": "main", "enabled": True, "enabled_modules": ["module.leads"]},
        )
        assert not repository.get_instance_settings().is_module_enabled("module.resources")


class TestListBlockingCandidates:
    def test_filters_status_enabled_and_resource(
        self, repository: ReservationRepository, seed: Callable[..., None]
    ) -> None:
        def stored(reservation_id: str, resource_id: str, status: str, enabled: bool) -> dict:
            return {
                "reservation_id": reservation_id,
                "resource_id": resource_id,
                "booking_type": "date_range",
                "check_in_date": "2024-03-01",
                "status": status,
                "enabled": enabled,
            }

        seed(
            "reservations",
            stored("R1", "res-a", "confirmed", True),
            stored("R2", "res-a", "pending", True),
            stored("R3", "res-a", "cancelled", True),
            stored("R4", "res-a", "confirmed", False),
            stored("R5", "res-b", "confirmed", True),
        )
        candidates = repository.list_blocking_candidates("res-a")
        assert sorted(c.reservation_id for c in candidates) == ["R1", "R2"]

    def test_query_failure_returns_empty(self, db_service: Any) -> None:
        db_service.name_prefix = "no-such-prefix"
        assert ReservationRepository(db_service).list_blocking_candidates("res-a") == []


class TestCreateReservation:
    def test_writes_item_and_bumps_version(
        self,
        repository: ReservationRepository,
        seed: Callable[..., None],
        sample_resource: dict[str, Any],
    ) -> None:
        seed("resources", sample_resource)

        reservation_id = repository.create_reservation(_record(), expected_version=0)

        assert reservation_id is not None
        assert reservation_id.startswith("RES-")
        item = _table("reservations").get_item(Key={"reservation_id": reservation_id})["Item"]
        assert item["total_amount"] == Decimal("150.00")
        assert item["status"] == "pending"
        assert item["payment_provider"] == "manual"
        assert item["check_in_date"] == "2024-03-01T00:00:00+00:00"
        assert "lead_id" not in item
        assert "start_date_time" not in item
        resource = _table("resources").get_item(Key={"resource_id": "res-beach-house"})["Item"]
        assert resource["booking_version"] == 1

    def test_stale_version_is_rejected(
        self,
        repository: ReservationRepository,
        seed: Callable[..., None],
        sample_resource: dict[str, Any],
    ) -> None:
        seed("resources", sample_resource)

        first = repository.create_reservation(_record(), expected_version=0)
        second = repository.create_reservation(_record(), expected_version=0)

        assert first is not None
        assert second is None
        stored = _table("reservations").scan()["Items"]
        assert [item["reservation_id"] for item in stored] == [first]

    def test_missing_resource_is_rejected(self, repository: ReservationRepository) -> None:
        assert repository.create_reservation(_record("ghost"), expected_version=0) is None


class TestBestEffortWrites:
    def test_increment_reservation_count(
        self,
        repository: ReservationRepository,
        seed: Callable[..., None],
        sample_resource: dict[str, Any],
    ) -> None:
        seed("resources", sample_resource)
        repository.increment_reservation_count("res-beach-house")
        repository.increment_reservation_count("res-beach-house")
        item = _table("resources").get_item(Key={"resource_id": "res-beach-house"})["Item"]
        assert item["reservation_count"] == 2

    def test_update_lead_after_reservation(
        self,
        repository: ReservationRepository,
        seed: Callable[..., None],
        sample_lead: dict[str, Any],
    ) -> None:
        seed("leads", sample_lead)
        lead = Lead.model_validate(sample_lead)

        repository.update_lead_after_reservation(lead, "RES-2024-AAAA0001", close_lead=True)

        item = _table("leads").get_item(Key={"lead_id": "lead-123"})["Item"]
        assert item["status"] == "closed_won"
        assert item["notes"] == "Asked about parking\nreservation:RES-2024-AAAA0001"

    def test_lead_marked_contacted_without_close(
        self,
        repository: ReservationRepository,
        seed: Callable[..., None],
        sample_lead: dict[str, Any],
    ) -> None:
        seed("leads", sample_lead)
        repository.update_lead_after_reservation(
            Lead.model_validate(sample_lead), "RES-2024-AAAA0002", close_lead=False
        )
        item = _table("leads").get_item(Key={"lead_id": "lead-123"})["Item"]
        assert item["status"] == "contacted"

    def test_write_activity_log(self, repository: ReservationRepository) -> None:
        entry = ActivityLogEntry(
            actor_user_id="staff-001",
            actor_role="staff_manager",
            action="reservation.create_manual",
            entity_id="RES-2024-AAAA0003",
            after_data="{}",
            created_at=dt.datetime(2024, 2, 1, tzinfo=dt.UTC),
        )
        assert repository.write_activity_log(entry) is True
        items = _table("activity-logs").scan()["Items"]
        assert len(items) == 1
        assert items[0]["entity_type"] == "reservations"
        assert items[0]["severity"] == "info"
        assert items[0]["log_id"].startswith("LOG-")

    def test_activity_log_disabled(
        self, repository: ReservationRepository, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ACTIVITY_LOG_ENABLED", "false")
        entry = ActivityLogEntry(
            actor_user_id="staff-001",
            actor_role="owner",
            action="reservation.create_manual",
            entity_id="RES-2024-AAAA0004",
            after_data="{}",
            created_at=dt.datetime(2024, 2, 1, tzinfo=dt.UTC),
        )
        assert repository.write_activity_log(entry) is False
        assert _table("activity-logs").scan()["Items"] == []


class TestMergeLeadNotes:
    def test_appends_marker(self) -> None:
        assert merge_lead_notes("call back", "R1") == "call back\nreservation:R1"

    def test_empty_notes(self) -> None:
        assert merge_lead_notes("", "R1") == "reservation:R1"

    def test_marker_not_duplicated(self) -> None:
        assert merge_lead_notes("call back reservation:R1", "R1") == "call back reservation:R1"

    def test_capped_length(self) -> None:
        merged = merge_lead_notes("x" * 5000, "R1")
        assert len(merged) <= 4000
