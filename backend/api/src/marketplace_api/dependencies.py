"""FastAPI dependency injection providers for shared services.

Services are lazily instantiated and cached with @lru_cache so a warm Lambda
container reuses boto3 clients across invocations.

Usage in routes:
    from marketplace_api.dependencies import get_manual_reservation_service

    @router.post("/reservations/manual")
    def create(
        service: ManualReservationService = Depends(get_manual_reservation_service),
    ):
        ...

Service Dependency Graph:
    DynamoDBService (singleton via get_dynamodb_service)
        └── ReservationRepository
                └── ManualReservationService
                        ├── PricingService
                        └── ModulesService

Testing:
    Use reset_services() to clear cached instances between tests, or
    override get_manual_reservation_service via app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Header

from marketplace.services.dynamodb import get_dynamodb_service, reset_dynamodb_service
from marketplace.services.manual_reservation import ManualReservationService
from marketplace.services.pricing import PricingService
from marketplace.services.repository import ReservationRepository


@lru_cache
def get_reservation_repository() -> ReservationRepository:
    """Get cached ReservationRepository backed by the DynamoDB singleton."""
    return ReservationRepository(db=get_dynamodb_service())


@lru_cache
def get_pricing_service() -> PricingService:
    return PricingService()


@lru_cache
def get_manual_reservation_service() -> ManualReservationService:
    """Get cached ManualReservationService instance.

    Returns:
        ManualReservationService configured with all required dependencies.
    """
    return ManualReservationService(
        repository=get_reservation_repository(),
        pricing=get_pricing_service(),
    )


def get_actor_user_id(x_user_sub: str | None = Header(default=None)) -> str | None:
    """Authenticated user ID.

    API Gateway validates the JWT and passes its sub claim via x-user-sub.
    """
    return x_user_sub


def reset_services() -> None:
    """Clear cached service instances (for testing)."""
    get_manual_reservation_service.cache_clear()
    get_pricing_service.cache_clear()
    get_reservation_repository.cache_clear()
    reset_dynamodb_service()
