"""DynamoDB-backed collaborators for the manual reservation engine.

Tables (names prefixed by DynamoDBService):
    resources          resource_id
    leads              lead_id
    users              user_id
    reservations       reservation_id, GSI resource_id-index
    activity-logs      log_id
    instance-settings  key
"""

import datetime as dt
import os
import uuid
from typing import TYPE_CHECKING, Any

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from marketplace.models.enums import BLOCKING_STATUSES, LeadStatus
from marketplace.models.reservation import (
    ActivityLogEntry,
    ExistingReservation,
    ReservationRecord,
)
from marketplace.models.resource import InstanceSettings, Lead, Resource, UserProfile
from marketplace.utils.logging import get_logger
from marketplace.utils.normalize import normalize_text

from .dynamodb import serialize_item

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)

# Upper bound on stored reservations inspected per conflict check
MAX_CANDIDATES = 200
MAX_LEAD_NOTES = 4000


def generate_reservation_id() -> str:
    """Generate a unique reservation ID."""
    year = dt.datetime.now(dt.UTC).year
    unique_part = uuid.uuid4().hex[:8].upper()
    return f"RES-{year}-{unique_part}"


def activity_log_enabled() -> bool:
    """Activity logging switch (ACTIVITY_LOG_ENABLED, default on)."""
    return os.getenv("ACTIVITY_LOG_ENABLED", "true").strip().lower() not in {
        "0",
        "false",
        "no",
        "off",
    }


def merge_lead_notes(notes: str, reservation_id: str) -> str:
    """Append a ``reservation:<id>`` marker to lead notes unless present."""
    normalized = normalize_text(notes, 3600)
    marker = f"reservation:{reservation_id}"
    if marker in normalized:
        return normalized
    separator = "\n" if normalized else ""
    return f"{normalized}{separator}{marker}"[:MAX_LEAD_NOTES]


class ReservationRepository:
    """Reads and writes the records the reservation engine depends on."""

    RESOURCES = "resources"
    LEADS = "leads"
    USERS = "users"
    RESERVATIONS = "reservations"
    ACTIVITY_LOGS = "activity-logs"
    INSTANCE_SETTINGS = "instance-settings"

    RESOURCE_INDEX = "resource_id-index"

    def __init__(self, db: "DynamoDBService") -> None:
        """Initialize repository.

        Args:
            db: DynamoDB service instance
        """
        self.db = db

    # Lookups

    def get_resource(self, resource_id: str) -> Resource | None:
        item = self.db.get_item(self.RESOURCES, {"resource_id": resource_id})
        return Resource.model_validate(item) if item else None

    def get_lead(self, lead_id: str) -> Lead | None:
        item = self.db.get_item(self.LEADS, {"lead_id": lead_id})
        return Lead.model_validate(item) if item else None

    def get_user_profile(self, user_id: str) -> UserProfile | None:
        item = self.db.get_item(self.USERS, {"user_id": user_id})
        return UserProfile.model_validate(item) if item else None

    def get_instance_settings(self) -> InstanceSettings:
        """Load the main instance settings; defaults when missing or unreadable."""
        try:
            item = self.db.get_item(self.INSTANCE_SETTINGS, {"key": "main"})
        except (ClientError, BotoCoreError) as e:
            logger.warning("Instance settings unavailable, using defaults: %s", e)
            return InstanceSettings()

        if not item:
            return InstanceSettings()

        settings = InstanceSettings.model_validate(item)
        if not settings.enabled_modules:
            # An empty module list means "not configured", not "everything off"
            settings = settings.model_copy(
                update={"enabled_modules": InstanceSettings().enabled_modules}
            )
        return settings

    def list_blocking_candidates(self, resource_id: str) -> list[ExistingReservation]:
        """Enabled pending/confirmed reservations for a resource.

        Capped at MAX_CANDIDATES. A failed query yields an empty list so a
        listing outage does not block manual bookings.
        """
        filter_expression = Attr("enabled").eq(True) & Attr("status").is_in(
            sorted(status.value for status in BLOCKING_STATUSES)
        )
        try:
            items = self.db.query_index(
                table=self.RESERVATIONS,
                index_name=self.RESOURCE_INDEX,
                partition_key="resource_id",
                value=resource_id,
                filter_expression=filter_expression,
                limit=MAX_CANDIDATES,
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning(
                "Candidate reservation query failed for %s, assuming none: %s",
                resource_id,
                e,
            )
            return []

        return [ExistingReservation.model_validate(item) for item in items]

    # Primary write

    def create_reservation(
        self,
        record: ReservationRecord,
        expected_version: int,
    ) -> str | None:
        """Persist a reservation, serialized per resource.

        The reservation Put and a conditional bump of the resource's
        booking_version run in one transaction. If another reservation for
        the same resource was written since ``expected_version`` was read,
        the transaction is cancelled.

        Args:
            record: Reservation to store
            expected_version: booking_version seen when the resource was loaded

        Returns:
            New reservation ID, or None if the transaction was cancelled
        """
        reservation_id = generate_reservation_id()
        item = record.to_item(reservation_id)

        transact_items: list[dict[str, Any]] = [
            {
                "Put": {
                    "TableName": self.db.table_name(self.RESERVATIONS),
                    "Item": serialize_item(item),
                    "ConditionExpression": "attribute_not_exists(reservation_id)",
                }
            },
            {
                "Update": {
                    "TableName": self.db.table_name(self.RESOURCES),
                    "Key": {"resource_id": {"S": record.resource_id}},
                    "UpdateExpression": "SET booking_version = :next",
                    "ConditionExpression": (
                        "attribute_exists(resource_id) AND "
                        "(attribute_not_exists(booking_version) OR booking_version = :seen)"
                    ),
                    "ExpressionAttributeValues": {
                        ":next": {"N": str(expected_version + 1)},
                        ":seen": {"N": str(expected_version)},
                    },
                }
            },
        ]

        if not self.db.transact_write(transact_items):
            return None
        return reservation_id

    # Best-effort writes

    def increment_reservation_count(self, resource_id: str) -> None:
        self.db.update_item(
            self.RESOURCES,
            {"resource_id": resource_id},
            "ADD reservation_count :one",
            {":one": 1},
        )

    def update_lead_after_reservation(
        self,
        lead: Lead,
        reservation_id: str,
        close_lead: bool,
    ) -> None:
        """Mark a lead as handled and link the new reservation in its notes."""
        status = LeadStatus.CLOSED_WON if close_lead else LeadStatus.CONTACTED
        self.db.update_item(
            self.LEADS,
            {"lead_id": lead.lead_id},
            "SET #status = :status, notes = :notes, updated_at = :now",
            {
                ":status": status.value,
                ":notes": merge_lead_notes(lead.notes, reservation_id),
                ":now": dt.datetime.now(dt.UTC).isoformat(),
            },
            names={"#status": "status"},
        )

    def write_activity_log(self, entry: ActivityLogEntry) -> bool:
        """Store an activity log entry.

        Returns:
            False when activity logging is switched off, True once written
        """
        if not activity_log_enabled():
            return False

        item = entry.model_dump(mode="json")
        item["log_id"] = f"LOG-{uuid.uuid4().hex.upper()}"
        self.db.put_item(self.ACTIVITY_LOGS, item)
        return True
