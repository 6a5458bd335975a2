"""Price resolution for event and reservation bookings.

Totals are always computed here from the offering's rules; a total sent
by a client is never trusted.
"""

from collections.abc import Sequence
from decimal import Decimal

from bookings.domain import (
    DiscountType,
    EventDiscount,
    Money,
    PriceQuote,
    PricingTier,
    ProgramDiscount,
    SelectedDate,
)
from bookings.domain.errors import InvalidQuantityError

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def resolve_flat(
    unit_price: Money,
    quantity: int,
    discount: EventDiscount | None = None,
    current_participant_total: int = 0,
) -> PriceQuote:
    """Price `quantity` seats of an event or private event.

    The discount activates once the offering's cumulative sign-ups, this
    order included, reach `discount.min_participants`. It then lowers the
    unit price for every seat in the order.

    Raises:
        InvalidQuantityError: If quantity is below 1.
    """
    if quantity < 1:
        raise InvalidQuantityError(quantity)

    price = unit_price.amount
    applied = False
    if (
        discount is not None
        and discount.is_complete
        and current_participant_total + quantity >= discount.min_participants
    ):
        price = _discounted(price, discount.type, discount.value)
        applied = True

    return PriceQuote(
        total=Money(price * quantity).rounded(),
        unit_price=Money(price).rounded(),
        discount_applied=applied,
    )


def resolve_tiered(
    price_per_day_per_participant: Money,
    selected_dates: Sequence[SelectedDate],
    day_pricing_tiers: Sequence[PricingTier] = (),
    discount: ProgramDiscount | None = None,
) -> PriceQuote:
    """Price a multi-day reservation.

    The matched tier's price replaces the base per-day rate for every
    participant-day. Without tiers the base rate applies.

    Raises:
        InvalidQuantityError: If no dates are selected or a date has fewer
            than one participant.
    """
    if not selected_dates:
        raise InvalidQuantityError(0)
    for entry in selected_dates:
        if entry.number_of_participants < 1:
            raise InvalidQuantityError(entry.number_of_participants)

    total_days = len(selected_dates)
    participant_days = sum(entry.number_of_participants for entry in selected_dates)

    tier = select_tier(total_days, day_pricing_tiers)
    rate = tier.price.amount if tier is not None else price_per_day_per_participant.amount

    applied = False
    if discount is not None and discount.is_complete and total_days >= discount.min_days:
        rate = _discounted(rate, discount.type, discount.value)
        applied = True

    return PriceQuote(
        total=Money(rate * participant_days).rounded(),
        unit_price=Money(rate).rounded(),
        applied_tier=tier,
        discount_applied=applied,
    )


def select_tier(total_days: int, tiers: Sequence[PricingTier]) -> PricingTier | None:
    """Pick the tier with the most days not above `total_days`.

    Falls back to the tier with the fewest days when every tier needs more
    days than were booked, so a price is always resolvable.
    """
    if not tiers:
        return None
    eligible = [tier for tier in tiers if tier.number_of_days <= total_days]
    if eligible:
        return max(eligible, key=lambda tier: tier.number_of_days)
    return min(tiers, key=lambda tier: tier.number_of_days)


def _discounted(amount: Decimal, kind: DiscountType, value: Decimal) -> Decimal:
    if kind is DiscountType.PERCENTAGE:
        amount = amount * (1 - Decimal(value) / HUNDRED)
    else:
        amount = amount - Decimal(value)
    return max(amount, ZERO)
