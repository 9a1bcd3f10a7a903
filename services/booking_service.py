"""
Booking service - checkout, payments and cancellation
"""
import logging
import uuid
from decimal import Decimal
from typing import List, Optional

from core.errors import (
    AuthorizationError,
    BookingNotFound,
    ConcurrentUpdateError,
    EmptyCart,
    InvalidStatusTransition,
    ValidationError,
)
from database.repository import BookingRepository
from models.booking import Booking, BookingItem, BookingStatus, PaymentStatus, CancellationQuote
from .booking_lifecycle import BookingLifecycle
from .cancellation import quote_cancellation, refund_payment_status, DEFAULT_MINIMUM_CHARGE
from .cart_service import CartService
from .catalog_service import CatalogService
from .pricing import rental_days, to_money, ZERO

logger = logging.getLogger(__name__)

PARTIAL_MODE = "partial"
FULL_MODE = "full"


class BookingService:
    # Booking business logic: turns the priced cart into a booking and runs its lifecycle

    def __init__(self, booking_repository: BookingRepository, cart_service: CartService,
                 catalog_service: CatalogService, clock,
                 cancellation_charge: Decimal = DEFAULT_MINIMUM_CHARGE,
                 partial_payment_ratio: Decimal = Decimal("0.2")):
        self.booking_repo = booking_repository
        self.cart_service = cart_service
        self.catalog_service = catalog_service
        self.clock = clock
        self.cancellation_charge = cancellation_charge
        self.partial_payment_ratio = partial_payment_ratio

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repo.load_booking(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    def list_bookings(self, customer_id: Optional[str] = None,
                      status: Optional[BookingStatus] = None) -> List[Booking]:
        return self.booking_repo.list_bookings(customer_id, status)

    def get_owned_booking(self, booking_id: str, customer_id: str, is_admin: bool) -> Booking:
        # Customers may only act on their own bookings; admins on any
        booking = self.get_booking(booking_id)
        if not is_admin and booking.customer_id != customer_id:
            raise AuthorizationError()
        return booking

    def create_booking(self, customer_id: str) -> Booking:
        # Snapshot the priced cart into a PENDING/UNPAID booking
        cart = self.cart_service.get_cart(customer_id)
        if not cart.items:
            raise EmptyCart()

        for item in cart.items:
            rental_days(item.pickup_date, item.return_date)

        booking_id = str(uuid.uuid4())
        booking = Booking(
            booking_id=booking_id,
            customer_id=customer_id,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.UNPAID,
            rent_total=cart.rent_total,
            security_deposit_total=cart.security_deposit_total,
            cart_total=cart.cart_total,
            discounted_total=cart.discounted_total,
            paid_amount=ZERO,
            remaining_amount=cart.discounted_total,
            booking_date=self.clock.now(),
            coupon_id=cart.coupon.coupon_id if cart.coupon else None,
            items=[
                BookingItem(
                    booking_item_id=str(uuid.uuid4()),
                    booking_id=booking_id,
                    motorcycle_id=item.motorcycle_id,
                    quantity=item.quantity,
                    pickup_date=item.pickup_date,
                    dropoff_date=item.return_date,
                    rent_per_day=item.rent_per_day,
                    security_deposit=item.security_deposit
                )
                for item in cart.items
            ]
        )

        # Stock first, then the cart: nothing is saved unless both succeed
        quantities = [(item.motorcycle_id, item.quantity) for item in booking.items]
        self.catalog_service.reserve_all(quantities)
        try:
            # A concurrent checkout of the same cart fails on the version check
            self.cart_service.claim_cart(cart)
        except ConcurrentUpdateError:
            for motorcycle_id, quantity in quantities:
                self.catalog_service.release(motorcycle_id, quantity)
            raise

        self.booking_repo.save_booking(booking)

        logger.info("Booking %s created for %s, total %s", booking_id, customer_id,
                    booking.discounted_total)
        return booking

    def payment_due(self, booking_id: str, mode: str = FULL_MODE) -> Decimal:
        # Partial mode asks for an advance on the rent, full mode for the whole balance
        booking = self.get_booking(booking_id)
        if booking.remaining_amount <= ZERO:
            raise ValidationError("This booking has no remaining balance.")

        if mode == PARTIAL_MODE:
            advance = to_money(booking.rent_total * self.partial_payment_ratio)
            return min(advance, booking.remaining_amount)
        if mode == FULL_MODE:
            return booking.remaining_amount
        raise ValidationError(f"Unknown payment mode: {mode}")

    def record_payment(self, booking_id: str, amount: Decimal) -> Booking:
        """Record money received for a booking.

        A payment that settles the balance confirms the booking; anything
        less leaves it PENDING with a PARTIAL payment status. Payments above
        the remaining balance are rejected.
        """
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationError("Payment amount must be greater than 0")

        booking = self.get_booking(booking_id)
        if booking.status != BookingStatus.PENDING:
            raise InvalidStatusTransition(booking.status.value, BookingStatus.CONFIRMED.value)
        if amount > booking.remaining_amount:
            raise ValidationError(
                f"Payment of {amount} exceeds the remaining balance of {booking.remaining_amount}"
            )

        booking.paid_amount = to_money(booking.paid_amount + amount)
        booking.remaining_amount = to_money(booking.discounted_total - booking.paid_amount)

        if booking.remaining_amount <= ZERO:
            booking.remaining_amount = ZERO
            BookingLifecycle.change_payment_status(booking, PaymentStatus.FULLY_PAID)
            BookingLifecycle.transition(booking, BookingStatus.CONFIRMED)
        else:
            BookingLifecycle.change_payment_status(booking, PaymentStatus.PARTIAL)

        self.booking_repo.save_booking(booking)
        logger.info("Payment of %s recorded for booking %s (%s)", amount, booking_id,
                    booking.payment_status.value)
        return booking

    def quote_cancellation(self, booking_id: str, customer_id: str,
                           is_admin: bool = False) -> CancellationQuote:
        booking = self.get_owned_booking(booking_id, customer_id, is_admin)
        return quote_cancellation(booking, self.clock.now(), self.cancellation_charge)

    def cancel_booking(self, booking_id: str, customer_id: str, is_admin: bool = False,
                       reason: Optional[str] = None) -> Booking:
        # Quote, move to CANCELLED, record the refund and hand the motorcycles back
        booking = self.get_owned_booking(booking_id, customer_id, is_admin)
        BookingLifecycle.validate_transition(booking.status, BookingStatus.CANCELLED)

        quote = quote_cancellation(booking, self.clock.now(), self.cancellation_charge)

        BookingLifecycle.transition(booking, BookingStatus.CANCELLED)
        BookingLifecycle.change_payment_status(
            booking,
            refund_payment_status(booking.payment_status, booking.paid_amount, quote.refundable_amount)
        )
        booking.cancellation_charge = quote.cancellation_charge
        booking.refund_amount = quote.refundable_amount
        booking.cancellation_reason = reason or "N/A"

        self.booking_repo.save_booking(booking)
        for item in booking.items:
            self.catalog_service.release(item.motorcycle_id, item.quantity)

        logger.info("Booking %s cancelled: charge %s, refund %s", booking_id,
                    quote.cancellation_charge, quote.refundable_amount)
        return booking

    def update_status(self, booking_id: str, status: BookingStatus,
                      reason: Optional[str] = None) -> Booking:
        # Admin status change; cancellation goes through the refund path
        if status == BookingStatus.CANCELLED:
            return self.cancel_booking(booking_id, customer_id="", is_admin=True, reason=reason)

        booking = self.get_booking(booking_id)
        BookingLifecycle.transition(booking, status)
        self.booking_repo.save_booking(booking)
        logger.info("Booking %s moved to %s", booking_id, status.value)
        return booking
