"""Pricing service for manual reservation amounts."""

from decimal import Decimal
from typing import Any

from marketplace.models.enums import BookingType, Currency, PricingModel, ScheduleType
from marketplace.models.errors import ErrorCode, ReservationError
from marketplace.models.reservation import AmountOverrides, MoneyAmounts
from marketplace.models.resource import Resource
from marketplace.models.schedule import ScheduleContext
from marketplace.utils.normalize import MAX_MONEY, has_value, round_money, to_money

DEFAULT_CURRENCY = Currency.MXN

_NIGHTLY_MODELS = frozenset({PricingModel.PER_NIGHT, PricingModel.PER_DAY})
_ZERO = Decimal("0.00")


class PricingService:
    """Service for base amount calculation and override reconciliation."""

    def compute_base_amount(
        self,
        resource: Resource,
        category: BookingType,
        nights: int,
    ) -> Decimal | None:
        """Base amount from the resource's unit price and pricing model.

        Args:
            resource: Resource being booked
            category: date_range for night-based schedules, else the booking type
            nights: Resolved nights (0 for time slots)

        Returns:
            Rounded base amount, or None if the resource has no usable price
            or the amount exceeds MAX_MONEY
        """
        unit_amount = to_money(resource.price)
        if unit_amount is None or unit_amount <= 0:
            return None

        multiplier = 1
        if category == BookingType.DATE_RANGE and resource.pricing in _NIGHTLY_MODELS:
            multiplier = max(1, nights)

        amount = round_money(unit_amount * multiplier)
        return amount if amount <= MAX_MONEY else None

    def calculate_amounts(
        self,
        resource: Resource,
        booking_type: BookingType,
        schedule: ScheduleContext,
        overrides: AmountOverrides | None = None,
    ) -> MoneyAmounts:
        """Reconcile computed and caller-supplied amounts.

        A valid caller base wins over the computed base; fees and tax default
        to zero; a valid caller total is trusted verbatim, otherwise the total
        is base + fees + tax.

        Raises:
            ReservationError: AMOUNT_INVALID when no base can be resolved or
                fees/tax are supplied but invalid, or the
                computed total exceeds MAX_MONEY.
        """
        overrides = overrides or AmountOverrides()
        category = (
            BookingType.DATE_RANGE
            if schedule.schedule_type == ScheduleType.DATE_RANGE
            else booking_type
        )
        computed_base = self.compute_base_amount(resource, category, schedule.nights)

        base = to_money(overrides.base, computed_base)
        if base is None:
            raise ReservationError(
                ErrorCode.AMOUNT_INVALID,
                details={"field": "base_amount"},
            )

        fees = self._optional_amount(overrides.fees, "fees_amount")
        tax = self._optional_amount(overrides.tax, "tax_amount")

        # Caller total is not cross-checked against base + fees + tax
        total = to_money(overrides.total)
        if total is None:
            total = round_money(base + fees + tax)
            if total > MAX_MONEY:
                raise ReservationError(
                    ErrorCode.AMOUNT_INVALID,
                    details={"field": "total_amount"},
                )

        return MoneyAmounts(base=base, fees=fees, tax=tax, total=total)

    def resolve_currency(self, requested: Any, resource: Resource) -> Currency:
        """Caller currency, else the resource's, else MXN.

        Raises:
            ReservationError: CURRENCY_NOT_SUPPORTED
        """
        raw = next(
            (value for value in (requested, resource.currency) if has_value(value)),
            DEFAULT_CURRENCY.value,
        )
        currency = Currency.parse(raw)
        if currency is None:
            raise ReservationError(
                ErrorCode.CURRENCY_NOT_SUPPORTED,
                details={"currency": str(raw).strip()[:3].upper()},
            )
        return currency

    def _optional_amount(self, value: Any, field: str) -> Decimal:
        if not has_value(value):
            return _ZERO
        amount = to_money(value)
        if amount is None:
            raise ReservationError(ErrorCode.AMOUNT_INVALID, details={"field": field})
        return amount
