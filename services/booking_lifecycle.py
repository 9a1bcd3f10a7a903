"""
Booking lifecycle state machine - booking and payment status transitions
"""
import logging
from typing import Dict, Set

from core.errors import InvalidStatusTransition, InvalidPaymentStatusTransition
from models.booking import Booking, BookingStatus, PaymentStatus

logger = logging.getLogger(__name__)


class BookingLifecycle:
    """Legal booking status and payment status moves.

    CANCELLED and COMPLETED are terminal: every transition out of them is
    rejected whatever the target. Payment status may always stay where it
    is (a second partial payment keeps PARTIAL).
    """

    _ALLOWED_TRANSITIONS: Dict[BookingStatus, Set[BookingStatus]] = {
        BookingStatus.PENDING: {
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
        },
        BookingStatus.CONFIRMED: {
            BookingStatus.CANCELLED,
            BookingStatus.COMPLETED,
        },
        BookingStatus.CANCELLED: set(),
        BookingStatus.COMPLETED: set(),
    }

    _ALLOWED_PAYMENT_TRANSITIONS: Dict[PaymentStatus, Set[PaymentStatus]] = {
        PaymentStatus.UNPAID: {
            PaymentStatus.PARTIAL,
            PaymentStatus.FULLY_PAID,
        },
        PaymentStatus.PARTIAL: {
            PaymentStatus.FULLY_PAID,
            PaymentStatus.PARTIAL_REFUNDED,
            PaymentStatus.FULLY_REFUNDED,
        },
        PaymentStatus.FULLY_PAID: {
            PaymentStatus.PARTIAL_REFUNDED,
            PaymentStatus.FULLY_REFUNDED,
        },
        PaymentStatus.PARTIAL_REFUNDED: {
            PaymentStatus.FULLY_REFUNDED,
        },
        PaymentStatus.FULLY_REFUNDED: set(),
    }

    @classmethod
    def is_terminal(cls, status: BookingStatus) -> bool:
        return not cls._ALLOWED_TRANSITIONS[status]

    @classmethod
    def can_transition(cls, from_status: BookingStatus, to_status: BookingStatus) -> bool:
        return to_status in cls._ALLOWED_TRANSITIONS[from_status]

    @classmethod
    def validate_transition(cls, from_status: BookingStatus, to_status: BookingStatus):
        if not cls.can_transition(from_status, to_status):
            logger.warning("Rejected booking transition %s -> %s", from_status.value, to_status.value)
            raise InvalidStatusTransition(from_status.value, to_status.value)

    @classmethod
    def transition(cls, booking: Booking, to_status: BookingStatus) -> Booking:
        cls.validate_transition(booking.status, to_status)
        booking.status = to_status
        return booking

    @classmethod
    def can_change_payment(cls, from_status: PaymentStatus, to_status: PaymentStatus) -> bool:
        if from_status == to_status:
            return True
        return to_status in cls._ALLOWED_PAYMENT_TRANSITIONS[from_status]

    @classmethod
    def change_payment_status(cls, booking: Booking, to_status: PaymentStatus) -> Booking:
        if not cls.can_change_payment(booking.payment_status, to_status):
            logger.warning("Rejected payment transition %s -> %s",
                           booking.payment_status.value, to_status.value)
            raise InvalidPaymentStatusTransition(booking.payment_status.value, to_status.value)
        booking.payment_status = to_status
        return booking
