"""
Tests for checkout, payments and cancellation
"""
import unittest
from datetime import date, datetime
from decimal import Decimal

from core.errors import (
    AuthorizationError,
    BookingNotFound,
    EmptyCart,
    InsufficientStock,
    InvalidStatusTransition,
    ValidationError,
)
from models.booking import BookingStatus, PaymentStatus
from services.booking_service import PARTIAL_MODE, FULL_MODE
from rental_test_case import RentalTestCase

PICKUP = date(2025, 1, 10)
RETURN = date(2025, 1, 12)


class BookingTestCase(RentalTestCase):

    def checkout(self, with_coupon=True):
        # 2 x classic for 3 days: rent 3000, deposit 2000, 20% off 5000 = 4000
        self.desk.cart_service.add_or_update_item(
            self.customer_id, "classic-350", 2, PICKUP, RETURN
        )
        if with_coupon:
            self.create_coupon()
            self.desk.cart_service.apply_coupon(self.customer_id, "SUMMER20")
        return self.desk.booking_service.create_booking(self.customer_id)

    def stock(self, motorcycle_id="classic-350"):
        return self.desk.catalog_service.get_motorcycle(motorcycle_id).available_quantity


class TestCreateBooking(BookingTestCase):

    def test_checkout_snapshots_cart(self):
        booking = self.checkout()

        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertEqual(booking.payment_status, PaymentStatus.UNPAID)
        self.assertEqual(booking.rent_total, Decimal("3000.00"))
        self.assertEqual(booking.security_deposit_total, Decimal("2000.00"))
        self.assertEqual(booking.cart_total, Decimal("5000.00"))
        self.assertEqual(booking.discounted_total, Decimal("4000.00"))
        self.assertEqual(booking.paid_amount, Decimal("0"))
        self.assertEqual(booking.remaining_amount, Decimal("4000.00"))
        self.assertIsNotNone(booking.coupon_id)
        self.assertEqual(booking.booking_date, datetime(2025, 1, 1, 0, 0))

        self.assertEqual(len(booking.items), 1)
        self.assertEqual(booking.items[0].quantity, 2)
        self.assertEqual(booking.items[0].dropoff_date, RETURN)

    def test_checkout_empties_cart_and_takes_stock(self):
        self.checkout()

        cart = self.desk.cart_service.get_cart(self.customer_id)
        self.assertEqual(cart.items, [])
        self.assertIsNone(cart.coupon)
        self.assertEqual(self.stock(), 3)

    def test_booking_is_stored(self):
        booking = self.checkout()
        stored = self.desk.booking_service.get_booking(booking.booking_id)

        self.assertEqual(stored.discounted_total, booking.discounted_total)
        self.assertEqual(stored.items[0].pickup_date, PICKUP)
        self.assertEqual([b.booking_id for b in self.desk.booking_service.list_bookings(self.customer_id)],
                         [booking.booking_id])

    def test_booking_is_unaffected_by_later_cart_changes(self):
        booking = self.checkout(with_coupon=False)
        self.desk.cart_service.add_or_update_item(
            self.customer_id, "classic-350", 1, PICKUP, RETURN
        )

        stored = self.desk.booking_service.get_booking(booking.booking_id)
        self.assertEqual(stored.discounted_total, Decimal("5000.00"))

    def test_last_unit_goes_to_one_checkout(self):
        cart_service = self.desk.cart_service
        cart_service.add_or_update_item("customer-1", "himalayan", 1, PICKUP, RETURN)
        cart_service.add_or_update_item("customer-2", "himalayan", 1, PICKUP, RETURN)

        self.desk.booking_service.create_booking("customer-1")
        with self.assertRaises(InsufficientStock):
            self.desk.booking_service.create_booking("customer-2")

        self.assertEqual(self.stock("himalayan"), 0)
        self.assertEqual(self.desk.booking_service.list_bookings("customer-2"), [])
        self.assertEqual(len(cart_service.get_cart("customer-2").items), 1)

    def test_failed_checkout_returns_reserved_stock(self):
        cart_service = self.desk.cart_service
        cart_service.add_or_update_item(self.customer_id, "classic-350", 2, PICKUP, RETURN)
        cart_service.add_or_update_item(self.customer_id, "himalayan", 1, PICKUP, RETURN)
        self.desk.motorcycle_repo.adjust_stock("himalayan", -1)

        with self.assertRaises(InsufficientStock):
            self.desk.booking_service.create_booking(self.customer_id)

        self.assertEqual(self.stock(), 5)
        self.assertEqual(self.stock("himalayan"), 0)
        self.assertEqual(self.desk.booking_service.list_bookings(self.customer_id), [])

    def test_empty_cart(self):
        with self.assertRaises(EmptyCart):
            self.desk.booking_service.create_booking(self.customer_id)

    def test_unknown_booking(self):
        with self.assertRaises(BookingNotFound):
            self.desk.booking_service.get_booking("missing")

    def test_list_by_status(self):
        booking = self.checkout()
        self.assertEqual(len(self.desk.booking_service.list_bookings(status=BookingStatus.PENDING)), 1)
        self.assertEqual(self.desk.booking_service.list_bookings(status=BookingStatus.CONFIRMED), [])
        self.assertEqual(self.desk.booking_service.list_bookings("someone-else"), [])
        self.assertEqual(self.desk.booking_service.list_bookings()[0].booking_id, booking.booking_id)


class TestPayments(BookingTestCase):

    def setUp(self):
        super().setUp()
        self.booking = self.checkout()

    def test_amount_due_by_mode(self):
        service = self.desk.booking_service
        self.assertEqual(service.payment_due(self.booking.booking_id, PARTIAL_MODE), Decimal("600.00"))
        self.assertEqual(service.payment_due(self.booking.booking_id, FULL_MODE), Decimal("4000.00"))

        with self.assertRaises(ValidationError):
            service.payment_due(self.booking.booking_id, "instalments")

    def test_partial_then_full_payment(self):
        service = self.desk.booking_service

        booking = service.record_payment(self.booking.booking_id, Decimal("600"))
        self.assertEqual(booking.status, BookingStatus.PENDING)
        self.assertEqual(booking.payment_status, PaymentStatus.PARTIAL)
        self.assertEqual(booking.remaining_amount, Decimal("3400.00"))
        self.assertEqual(booking.paid_amount + booking.remaining_amount, booking.discounted_total)

        booking = service.record_payment(self.booking.booking_id, Decimal("3400"))
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertEqual(booking.payment_status, PaymentStatus.FULLY_PAID)
        self.assertEqual(booking.remaining_amount, Decimal("0"))

        stored = service.get_booking(self.booking.booking_id)
        self.assertEqual(stored.paid_amount, Decimal("4000.00"))
        self.assertEqual(stored.status, BookingStatus.CONFIRMED)

    def test_no_payment_after_confirmation(self):
        service = self.desk.booking_service
        service.record_payment(self.booking.booking_id, Decimal("4000"))

        with self.assertRaises(InvalidStatusTransition):
            service.record_payment(self.booking.booking_id, Decimal("10"))
        with self.assertRaises(ValidationError):
            service.payment_due(self.booking.booking_id)

    def test_non_positive_payment(self):
        with self.assertRaises(ValidationError):
            self.desk.booking_service.record_payment(self.booking.booking_id, Decimal("0"))

    def test_payment_above_balance_is_rejected(self):
        service = self.desk.booking_service
        with self.assertRaises(ValidationError):
            service.record_payment(self.booking.booking_id, Decimal("4000.01"))

        stored = service.get_booking(self.booking.booking_id)
        self.assertEqual(stored.paid_amount, Decimal("0"))
        self.assertEqual(stored.remaining_amount, Decimal("4000.00"))
        self.assertEqual(stored.payment_status, PaymentStatus.UNPAID)


class TestCancelBooking(BookingTestCase):

    def setUp(self):
        super().setUp()
        self.booking = self.checkout()

    def test_cancel_paid_booking_early(self):
        # 9 days out: 0% tier, so the flat 199 applies
        self.desk.booking_service.record_payment(self.booking.booking_id, Decimal("4000"))

        booking = self.desk.booking_service.cancel_booking(self.booking.booking_id, self.customer_id)

        self.assertEqual(booking.status, BookingStatus.CANCELLED)
        self.assertEqual(booking.payment_status, PaymentStatus.PARTIAL_REFUNDED)
        self.assertEqual(booking.cancellation_charge, Decimal("199.00"))
        self.assertEqual(booking.refund_amount, Decimal("3801.00"))
        self.assertEqual(booking.cancellation_reason, "N/A")
        self.assertEqual(self.stock(), 5)

    def test_cancel_partially_paid_booking_close_to_pickup(self):
        self.desk.booking_service.record_payment(self.booking.booking_id, Decimal("600"))
        self.clock.set(datetime(2025, 1, 6, 9, 0))

        quote = self.desk.booking_service.quote_cancellation(self.booking.booking_id, self.customer_id)
        self.assertEqual(quote.days_until_pickup, 3)
        self.assertEqual(quote.cancellation_charge, Decimal("300.00"))

        booking = self.desk.booking_service.cancel_booking(
            self.booking.booking_id, self.customer_id, reason="Change of plans"
        )
        self.assertEqual(booking.refund_amount, Decimal("300.00"))
        self.assertEqual(booking.cancellation_reason, "Change of plans")

    def test_cancel_unpaid_booking(self):
        booking = self.desk.booking_service.cancel_booking(self.booking.booking_id, self.customer_id)

        self.assertEqual(booking.status, BookingStatus.CANCELLED)
        self.assertEqual(booking.payment_status, PaymentStatus.UNPAID)
        self.assertEqual(booking.cancellation_charge, Decimal("0"))
        self.assertEqual(booking.refund_amount, Decimal("0"))

    def test_other_customer_cannot_cancel(self):
        with self.assertRaises(AuthorizationError):
            self.desk.booking_service.cancel_booking(self.booking.booking_id, "customer-2")

        stored = self.desk.booking_service.get_booking(self.booking.booking_id)
        self.assertEqual(stored.status, BookingStatus.PENDING)

    def test_admin_can_cancel_any_booking(self):
        booking = self.desk.booking_service.cancel_booking(
            self.booking.booking_id, "", is_admin=True
        )
        self.assertEqual(booking.status, BookingStatus.CANCELLED)

    def test_cancelled_booking_cannot_be_cancelled_again(self):
        self.desk.booking_service.cancel_booking(self.booking.booking_id, self.customer_id)

        with self.assertRaises(InvalidStatusTransition):
            self.desk.booking_service.cancel_booking(self.booking.booking_id, self.customer_id)
        self.assertEqual(self.stock(), 5)


class TestAdminStatusChange(BookingTestCase):

    def setUp(self):
        super().setUp()
        self.booking = self.checkout()
        self.desk.booking_service.record_payment(self.booking.booking_id, Decimal("4000"))

    def test_complete_confirmed_booking(self):
        booking = self.desk.booking_service.update_status(self.booking.booking_id, BookingStatus.COMPLETED)
        self.assertEqual(booking.status, BookingStatus.COMPLETED)

    def test_completed_booking_cannot_be_reopened(self):
        self.desk.booking_service.update_status(self.booking.booking_id, BookingStatus.COMPLETED)

        with self.assertRaises(InvalidStatusTransition):
            self.desk.booking_service.update_status(self.booking.booking_id, BookingStatus.CONFIRMED)

        stored = self.desk.booking_service.get_booking(self.booking.booking_id)
        self.assertEqual(stored.status, BookingStatus.COMPLETED)

    def test_cancelling_through_status_change_refunds(self):
        booking = self.desk.booking_service.update_status(
            self.booking.booking_id, BookingStatus.CANCELLED, reason="No show"
        )
        self.assertEqual(booking.refund_amount, Decimal("3801.00"))
        self.assertEqual(booking.cancellation_reason, "No show")


if __name__ == '__main__':
    unittest.main()
