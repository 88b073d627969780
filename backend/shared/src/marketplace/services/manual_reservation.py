"""Manual reservation service.

Staff-facing flow that creates a reservation directly, optionally from a
lead. Every validation step runs before the single persistence write; the
writes that follow it are best-effort.
"""

import datetime as dt
from typing import TYPE_CHECKING, Any

from botocore.exceptions import BotoCoreError, ClientError

from marketplace.models.enums import (
    ActivitySeverity,
    PaymentStatus,
    ReservationStatus,
)
from marketplace.models.errors import ErrorCode, ReservationError
from marketplace.models.reservation import (
    ActivityLogEntry,
    AmountOverrides,
    GuestIdentity,
    ManualReservationRequest,
    ManualReservationResult,
    ReservationRecord,
    SideEffectOutcome,
)
from marketplace.models.resource import Lead, LeadSchedule, Resource, UserProfile
from marketplace.utils.logging import get_logger, log_reservation_operation
from marketplace.utils.normalize import clamp_int, first_text, normalize_text, safe_json

from .authorization import can_write_reservations
from .conflicts import find_conflict
from .modules import RESOURCES_MODULE, ModulesService
from .pricing import PricingService
from .scheduling import (
    ScheduleRequest,
    candidate_window,
    resolve_booking_type,
    resolve_schedule,
)
from .side_effects import run_best_effort

if TYPE_CHECKING:
    from .repository import ReservationRepository

logger = get_logger(__name__)

DEFAULT_GUEST_NAME = "Manual guest"
DEFAULT_GUEST_EMAIL = "manual@marketplace.local"
MAX_SPECIAL_REQUESTS_LENGTH = 2000
MAX_LEAD_MESSAGE_LENGTH = 300


class ManualReservationService:
    """Creates reservations on behalf of guests for authorized staff."""

    def __init__(
        self,
        repository: "ReservationRepository",
        pricing: PricingService | None = None,
        modules: ModulesService | None = None,
    ) -> None:
        """Initialize manual reservation service.

        Args:
            repository: Data access for resources, leads, users and reservations
            pricing: Amount calculator (default PricingService())
            modules: Module gate (default backed by ``repository``)
        """
        self.repository = repository
        self.pricing = pricing or PricingService()
        self.modules = modules or ModulesService(repository)

    def create_manual_reservation(
        self,
        actor_user_id: str | None,
        request: ManualReservationRequest,
        request_id: str | None = None,
    ) -> ManualReservationResult:
        """Create a reservation for a guest.

        Args:
            actor_user_id: Authenticated staff user making the request
            request: Manual reservation payload
            request_id: Correlation ID recorded on the activity log

        Returns:
            ManualReservationResult with the new reservation ID and record

        Raises:
            ReservationError: On any validation, authorization, availability
                or persistence failure
        """
        actor_id = normalize_text(actor_user_id, 128)
        if not actor_id:
            raise ReservationError(ErrorCode.AUTH_REQUIRED)

        try:
            return self._create(actor_id, request, request_id)
        except ReservationError as e:
            log_reservation_operation(
                logger,
                "create_manual_rejected",
                resource_id=request.resource_id,
                lead_id=request.lead_id,
                actor_user_id=actor_id,
                error_code=e.code.value,
            )
            raise
        except (ClientError, BotoCoreError) as e:
            log_reservation_operation(
                logger,
                "create_manual_failed",
                resource_id=request.resource_id,
                lead_id=request.lead_id,
                actor_user_id=actor_id,
                error=str(e),
            )
            raise ReservationError(ErrorCode.INTERNAL_ERROR) from e

    def _create(
        self,
        actor_id: str,
        request: ManualReservationRequest,
        request_id: str | None,
    ) -> ManualReservationResult:
        self.modules.assert_module_enabled(RESOURCES_MODULE)
        actor = self._authorize(actor_id)

        lead = self._load_lead(request.lead_id)
        resource = self._load_resource(request, lead)
        lead_schedule = lead.schedule() if lead else LeadSchedule()

        booking_type = resolve_booking_type(request.booking_type, resource)
        schedule = resolve_schedule(
            ScheduleRequest.from_sources(request, lead_schedule, resource),
            booking_type,
        )

        buffer_minutes = resource.buffer_minutes
        window = candidate_window(schedule, buffer_minutes)
        candidates = self.repository.list_blocking_candidates(resource.resource_id)
        conflict = find_conflict(window, candidates, buffer_minutes)
        if conflict is not None:
            log_reservation_operation(
                logger,
                "conflict_detected",
                resource_id=resource.resource_id,
                actor_user_id=actor_id,
                conflicting_reservation_id=conflict.reservation_id,
            )
            raise ReservationError(ErrorCode.RESERVATION_CONFLICT)

        guest = self._resolve_guest(request, lead, lead_schedule, actor)
        amounts = self.pricing.calculate_amounts(
            resource,
            booking_type,
            schedule,
            AmountOverrides.from_request(request),
        )
        currency = self.pricing.resolve_currency(request.currency, resource)

        record = ReservationRecord(
            resource_id=resource.resource_id,
            resource_owner_user_id=normalize_text(resource.owner_user_id, 64),
            lead_id=lead.lead_id if lead else None,
            guest_user_id=guest.guest_user_id,
            guest_name=guest.guest_name,
            guest_email=guest.guest_email,
            guest_phone=guest.guest_phone,
            commercial_mode=resource.commercial,
            booking_type=booking_type,
            schedule_type=schedule.schedule_type,
            check_in_date=schedule.check_in,
            check_out_date=schedule.check_out,
            start_date_time=schedule.start_date_time,
            end_date_time=schedule.end_date_time,
            guest_count=guest.guest_count,
            units=guest.units,
            nights=schedule.nights,
            amounts=amounts,
            currency=currency,
            status=ReservationStatus.parse(request.status) or ReservationStatus.PENDING,
            payment_status=(
                PaymentStatus.parse(request.payment_status) or PaymentStatus.PENDING
            ),
            external_ref=normalize_text(request.external_ref, 120),
            special_requests=first_text(
                normalize_text(request.special_requests, MAX_SPECIAL_REQUESTS_LENGTH),
                normalize_text(lead.last_message if lead else "", MAX_LEAD_MESSAGE_LENGTH),
            ),
            created_at=dt.datetime.now(dt.UTC),
        )

        reservation_id = self.repository.create_reservation(
            record, resource.booking_version
        )
        if reservation_id is None:
            raise ReservationError(
                ErrorCode.RESERVATION_CONFLICT,
                details={"reason": "concurrent_booking"},
            )

        side_effects = self._run_side_effects(
            reservation_id, record, lead, actor, request, request_id
        )

        log_reservation_operation(
            logger,
            "create_manual",
            reservation_id=reservation_id,
            resource_id=record.resource_id,
            lead_id=record.lead_id,
            actor_user_id=actor_id,
            total_amount=str(record.amounts.total),
            failed_side_effects=",".join(s.name for s in side_effects if not s.ok),
        )

        return ManualReservationResult(
            reservation_id=reservation_id,
            record=record,
            side_effects=side_effects,
        )

    # Lookups

    def _authorize(self, actor_id: str) -> UserProfile:
        actor = self.repository.get_user_profile(actor_id)
        if actor is None or not can_write_reservations(actor):
            raise ReservationError(ErrorCode.FORBIDDEN)
        return actor

    def _load_lead(self, lead_id: Any) -> Lead | None:
        key = normalize_text(lead_id, 128)
        if not key:
            return None

        lead = self.repository.get_lead(key)
        if lead is None or not lead.enabled:
            raise ReservationError(
                ErrorCode.LEAD_NOT_AVAILABLE,
                details={"lead_id": key},
            )
        return lead

    def _load_resource(
        self,
        request: ManualReservationRequest,
        lead: Lead | None,
    ) -> Resource:
        resource_id = first_text(
            request.resource_id,
            lead.resource_id if lead else None,
            max_length=128,
        )
        if not resource_id:
            raise ReservationError(
                ErrorCode.VALIDATION_ERROR,
                details={"field": "resource_id"},
                message="resource_id is required",
            )

        resource = self.repository.get_resource(resource_id)
        if resource is None or not resource.enabled:
            raise ReservationError(
                ErrorCode.RESOURCE_NOT_AVAILABLE,
                details={"resource_id": resource_id},
            )
        return resource

    def _get_guest_profile(self, guest_user_id: str) -> UserProfile | None:
        try:
            return self.repository.get_user_profile(guest_user_id)
        except (ClientError, BotoCoreError) as e:
            logger.warning("Guest profile lookup failed for %s: %s", guest_user_id, e)
            return None

    def _resolve_guest(
        self,
        request: ManualReservationRequest,
        lead: Lead | None,
        lead_schedule: LeadSchedule,
        actor: UserProfile,
    ) -> GuestIdentity:
        """Guest fields from request, then lead, then the guest's profile."""
        guest_user_id = first_text(
            request.guest_user_id,
            lead.user_id if lead else None,
            actor.user_id,
            max_length=64,
        )
        if guest_user_id == actor.user_id:
            profile: UserProfile | None = actor
        else:
            profile = self._get_guest_profile(guest_user_id)

        guest_name = first_text(
            request.guest_name,
            lead_schedule.guest_name,
            profile.display_name if profile else None,
            DEFAULT_GUEST_NAME,
            max_length=120,
        )
        guest_email = first_text(
            request.guest_email,
            lead_schedule.guest_email,
            profile.email if profile else None,
            actor.email,
            DEFAULT_GUEST_EMAIL,
            max_length=254,
        ).lower()
        guest_phone = first_text(
            request.guest_phone,
            lead_schedule.guest_phone,
            profile.phone if profile else None,
            max_length=20,
        )

        raw_count = (
            request.guest_count
            if request.guest_count is not None
            else lead_schedule.guest_count
        )
        return GuestIdentity(
            guest_user_id=guest_user_id,
            guest_name=guest_name,
            guest_email=guest_email,
            guest_phone=guest_phone,
            guest_count=clamp_int(raw_count, 1, 500, 1),
            units=clamp_int(request.units, 1, 9999, 1),
        )

    # Best-effort writes

    def _run_side_effects(
        self,
        reservation_id: str,
        record: ReservationRecord,
        lead: Lead | None,
        actor: UserProfile,
        request: ManualReservationRequest,
        request_id: str | None,
    ) -> list[SideEffectOutcome]:
        outcomes = [
            run_best_effort(
                "increment_reservation_count",
                self.repository.increment_reservation_count,
                record.resource_id,
            )
        ]

        if lead is not None:
            outcomes.append(
                run_best_effort(
                    "update_lead",
                    self.repository.update_lead_after_reservation,
                    lead,
                    reservation_id,
                    request.close_lead,
                )
            )

        outcomes.append(
            run_best_effort(
                "activity_log",
                self.repository.write_activity_log,
                self._build_activity_entry(reservation_id, record, actor, request_id),
            )
        )
        return outcomes

    def _build_activity_entry(
        self,
        reservation_id: str,
        record: ReservationRecord,
        actor: UserProfile,
        request_id: str | None,
    ) -> ActivityLogEntry:
        snapshot = {
            "reservation_id": reservation_id,
            "resource_id": record.resource_id,
            "lead_id": record.lead_id or "",
            "booking_type": record.booking_type.value,
            "schedule_type": record.schedule_type.value,
            "status": record.status.value,
            "payment_status": record.payment_status.value,
            "payment_provider": record.payment_provider.value,
            "total_amount": str(record.amounts.total),
            "currency": record.currency.value,
        }
        return ActivityLogEntry(
            actor_user_id=actor.user_id,
            actor_role=actor.normalized_role or "owner",
            action=(
                "reservation.create_manual_from_lead"
                if record.lead_id
                else "reservation.create_manual"
            ),
            entity_id=reservation_id,
            after_data=safe_json(snapshot),
            request_id=normalize_text(request_id, 120),
            severity=ActivitySeverity.INFO,
            created_at=record.created_at,
        )
