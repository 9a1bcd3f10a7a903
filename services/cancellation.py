"""
Cancellation charge and refund calculator
"""
from datetime import datetime, time, timedelta
from decimal import Decimal

from core.errors import ValidationError
from models.booking import Booking, PaymentStatus, CancellationQuote
from .pricing import to_money, ZERO

DEFAULT_MINIMUM_CHARGE = Decimal("199")

FULL_CHARGE = Decimal("1.0")
HALF_CHARGE = Decimal("0.5")
NO_CHARGE = Decimal("0.0")


def days_until_pickup(booking: Booking, now: datetime) -> int:
    # Whole days from now to the earliest pickup, truncated toward zero
    if not booking.items:
        raise ValidationError(f"Booking {booking.booking_id} has no items")

    earliest = min(item.pickup_date for item in booking.items)
    pickup_at = datetime.combine(earliest, time.min, tzinfo=now.tzinfo)
    return int((pickup_at - now) / timedelta(days=1))


def charge_percentage(days: int) -> Decimal:
    if days < 3:
        return FULL_CHARGE
    if days <= 7:
        return HALF_CHARGE
    # Nothing proportional, the minimum charge still applies
    return NO_CHARGE


def chargeable_base(booking: Booking):
    if booking.payment_status == PaymentStatus.PARTIAL:
        return booking.paid_amount
    if booking.payment_status == PaymentStatus.FULLY_PAID:
        return booking.rent_total
    return None


def quote_cancellation(booking: Booking, now: datetime,
                       min_flat_fee: Decimal = DEFAULT_MINIMUM_CHARGE) -> CancellationQuote:
    """Work out what cancelling ``booking`` at ``now`` would cost.

    The charge is a percentage of the paid amount (partial payment) or of
    the rent total (full payment), never less than ``min_flat_fee``.
    Bookings with nothing paid carry no charge. The refund is whatever was
    paid minus the charge, floored at zero.
    """
    days = days_until_pickup(booking, now)
    percentage = charge_percentage(days)

    base = chargeable_base(booking)
    if base is None:
        charge = ZERO
    else:
        charge = max(to_money(base * percentage), to_money(min_flat_fee))

    refundable = max(to_money(booking.paid_amount - charge), ZERO)

    return CancellationQuote(
        days_until_pickup=days,
        charge_percentage=percentage,
        cancellation_charge=charge,
        refundable_amount=refundable
    )


def refund_payment_status(current: PaymentStatus, paid_amount: Decimal,
                          refundable_amount: Decimal) -> PaymentStatus:
    # Nothing to hand back leaves the payment status where it was
    if refundable_amount <= ZERO:
        return current
    if refundable_amount >= paid_amount:
        return PaymentStatus.FULLY_REFUNDED
    return PaymentStatus.PARTIAL_REFUNDED
