"""
Tests for cancellation charge and refund calculation
"""
import unittest
from datetime import date, datetime, timedelta
from decimal import Decimal

from core.errors import ValidationError
from models.booking import Booking, BookingItem, BookingStatus, PaymentStatus
from services.cancellation import (
    charge_percentage,
    days_until_pickup,
    quote_cancellation,
    refund_payment_status,
)

NOW = datetime(2025, 1, 1, 0, 0)


def make_booking(payment_status=PaymentStatus.FULLY_PAID, paid="5000", rent="3000",
                 pickups=(date(2025, 1, 11),)):
    items = [
        BookingItem(
            booking_item_id=f"bi-{i}",
            booking_id="b1",
            motorcycle_id="m1",
            quantity=1,
            pickup_date=pickup,
            dropoff_date=pickup + timedelta(days=2),
            rent_per_day=Decimal("500"),
            security_deposit=Decimal("1000")
        )
        for i, pickup in enumerate(pickups)
    ]
    return Booking(
        booking_id="b1",
        customer_id="customer-1",
        status=BookingStatus.CONFIRMED,
        payment_status=payment_status,
        rent_total=Decimal(rent),
        security_deposit_total=Decimal("2000"),
        cart_total=Decimal("5000"),
        discounted_total=Decimal("5000"),
        paid_amount=Decimal(paid),
        remaining_amount=Decimal("5000") - Decimal(paid),
        booking_date=NOW,
        items=items
    )


class TestChargeTiers(unittest.TestCase):
    """Tier boundaries"""

    def test_tier_boundaries(self):
        self.assertEqual(charge_percentage(-4), Decimal("1.0"))
        self.assertEqual(charge_percentage(2), Decimal("1.0"))
        self.assertEqual(charge_percentage(3), Decimal("0.5"))
        self.assertEqual(charge_percentage(7), Decimal("0.5"))
        self.assertEqual(charge_percentage(8), Decimal("0.0"))

    def test_days_until_earliest_pickup(self):
        booking = make_booking(pickups=(date(2025, 1, 20), date(2025, 1, 6), date(2025, 1, 9)))
        self.assertEqual(days_until_pickup(booking, NOW), 5)

    def test_partial_days_are_truncated(self):
        booking = make_booking(pickups=(date(2025, 1, 6),))
        self.assertEqual(days_until_pickup(booking, datetime(2025, 1, 1, 18, 30)), 4)

    def test_past_pickup_is_negative(self):
        booking = make_booking(pickups=(date(2024, 12, 25),))
        self.assertEqual(days_until_pickup(booking, NOW), -7)

    def test_booking_without_items(self):
        booking = make_booking(pickups=())
        with self.assertRaises(ValidationError):
            days_until_pickup(booking, NOW)


class TestQuoteCancellation(unittest.TestCase):
    """Charge and refund amounts"""

    def test_partial_payment_mid_tier(self):
        booking = make_booking(PaymentStatus.PARTIAL, paid="4000", pickups=(date(2025, 1, 6),))
        quote = quote_cancellation(booking, NOW)

        self.assertEqual(quote.days_until_pickup, 5)
        self.assertEqual(quote.charge_percentage, Decimal("0.5"))
        self.assertEqual(quote.cancellation_charge, Decimal("2000.00"))
        self.assertEqual(quote.refundable_amount, Decimal("2000.00"))

    def test_full_payment_last_minute_charges_rent(self):
        booking = make_booking(PaymentStatus.FULLY_PAID, paid="5000", rent="3000",
                               pickups=(date(2025, 1, 2),))
        quote = quote_cancellation(booking, NOW)

        self.assertEqual(quote.charge_percentage, Decimal("1.0"))
        self.assertEqual(quote.cancellation_charge, Decimal("3000.00"))
        self.assertEqual(quote.refundable_amount, Decimal("2000.00"))

    def test_early_cancellation_still_pays_minimum_fee(self):
        booking = make_booking(PaymentStatus.FULLY_PAID, paid="5000", rent="3000",
                               pickups=(date(2025, 1, 11),))
        quote = quote_cancellation(booking, NOW)

        self.assertEqual(quote.charge_percentage, Decimal("0.0"))
        self.assertEqual(quote.cancellation_charge, Decimal("199.00"))
        self.assertEqual(quote.refundable_amount, Decimal("4801.00"))

    def test_minimum_fee_is_configurable(self):
        booking = make_booking(PaymentStatus.FULLY_PAID, pickups=(date(2025, 1, 11),))
        quote = quote_cancellation(booking, NOW, min_flat_fee=Decimal("250"))
        self.assertEqual(quote.cancellation_charge, Decimal("250.00"))

    def test_unpaid_booking_has_no_charge(self):
        booking = make_booking(PaymentStatus.UNPAID, paid="0", pickups=(date(2025, 1, 2),))
        quote = quote_cancellation(booking, NOW)

        self.assertEqual(quote.cancellation_charge, Decimal("0"))
        self.assertEqual(quote.refundable_amount, Decimal("0"))

    def test_refund_never_negative(self):
        booking = make_booking(PaymentStatus.PARTIAL, paid="150", pickups=(date(2025, 1, 11),))
        quote = quote_cancellation(booking, NOW)

        self.assertEqual(quote.cancellation_charge, Decimal("199.00"))
        self.assertEqual(quote.refundable_amount, Decimal("0.00"))

    def test_charge_floor_and_refund_identity_hold_across_tiers(self):
        for offset in range(-2, 15):
            for status, paid in ((PaymentStatus.PARTIAL, "600"), (PaymentStatus.FULLY_PAID, "5000")):
                booking = make_booking(status, paid=paid, pickups=(NOW.date() + timedelta(days=offset),))
                quote = quote_cancellation(booking, NOW)

                self.assertGreaterEqual(quote.cancellation_charge, Decimal("199"))
                self.assertEqual(quote.refundable_amount,
                                 max(booking.paid_amount - quote.cancellation_charge, Decimal("0")))


class TestRefundPaymentStatus(unittest.TestCase):

    def test_partial_refund(self):
        self.assertEqual(
            refund_payment_status(PaymentStatus.FULLY_PAID, Decimal("5000"), Decimal("4801")),
            PaymentStatus.PARTIAL_REFUNDED
        )

    def test_full_refund(self):
        self.assertEqual(
            refund_payment_status(PaymentStatus.PARTIAL, Decimal("1000"), Decimal("1000")),
            PaymentStatus.FULLY_REFUNDED
        )

    def test_nothing_to_refund_keeps_status(self):
        self.assertEqual(
            refund_payment_status(PaymentStatus.UNPAID, Decimal("0"), Decimal("0")),
            PaymentStatus.UNPAID
        )
        self.assertEqual(
            refund_payment_status(PaymentStatus.PARTIAL, Decimal("150"), Decimal("0")),
            PaymentStatus.PARTIAL
        )


if __name__ == '__main__':
    unittest.main()
