"""Manual reservation endpoints.

Staff create reservations on behalf of guests, optionally from a lead.

Protected endpoints require JWT token via Authorization header.
API Gateway validates the JWT and passes user identity via x-user-sub header.
"""

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from marketplace.models.errors import ErrorResponse
from marketplace.services.manual_reservation import ManualReservationService
from marketplace.utils.logging import get_correlation_id
from marketplace_api.dependencies import (
    get_actor_user_id,
    get_manual_reservation_service,
)
from marketplace_api.models.reservations import (
    ManualReservationCreateRequest,
    ManualReservationResponse,
)

router = APIRouter(tags=["reservations"])


@router.post(
    "/reservations/manual",
    summary="Create manual reservation",
    description="""
Create a reservation on behalf of a guest.

**Requires JWT authentication** and the `reservations.write` scope (or an
internal staff role).

Resolves the schedule from the request (falling back to the lead's
metadata), rejects overlaps with pending/confirmed reservations on the same
resource, and prices the stay from the resource unless amounts are given.

**Notes:**
- Fields accept snake_case or camelCase names
- `date_range` bookings use checkInDate/checkOutDate; `time_slot` and
  `fixed_event` bookings use startDateTime/endDateTime
- Resource slot buffers are applied around every existing reservation
""",
    response_description="Created reservation summary",
    response_model=ManualReservationResponse,
    status_code=HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse, "description": "Authentication required"},
        403: {"model": ErrorResponse, "description": "Forbidden or module disabled"},
        404: {"model": ErrorResponse, "description": "Lead or resource not available"},
        409: {"model": ErrorResponse, "description": "Schedule conflict"},
        422: {"model": ErrorResponse, "description": "Invalid schedule or amounts"},
    },
)
async def create_manual_reservation(
    body: ManualReservationCreateRequest,
    actor_user_id: str | None = Depends(get_actor_user_id),
    service: ManualReservationService = Depends(get_manual_reservation_service),
) -> ManualReservationResponse:
    """Create a manual reservation.

    Errors propagate as ReservationError and are rendered by the registered
    exception handlers.
    """
    result = service.create_manual_reservation(
        actor_user_id,
        body,
        request_id=get_correlation_id(),
    )
    return ManualReservationResponse.from_result(result)
