"""
Booking related data models
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Dict, Any


class BookingStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class PaymentStatus(Enum):
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    FULLY_PAID = "FULLY_PAID"
    PARTIAL_REFUNDED = "PARTIAL_REFUNDED"
    FULLY_REFUNDED = "FULLY_REFUNDED"


@dataclass
class BookingItem:
    """Booked motorcycle line, copied from the cart at checkout"""
    booking_item_id: str
    booking_id: str
    motorcycle_id: str
    quantity: int
    pickup_date: date
    dropoff_date: date
    rent_per_day: Decimal
    security_deposit: Decimal

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "booking_item_id": self.booking_item_id,
            "booking_id": self.booking_id,
            "motorcycle_id": self.motorcycle_id,
            "quantity": self.quantity,
            "pickup_date": self.pickup_date.isoformat(),
            "dropoff_date": self.dropoff_date.isoformat(),
            "rent_per_day": str(self.rent_per_day),
            "security_deposit": str(self.security_deposit)
        }


@dataclass
class Booking:
    """Booking data model"""
    booking_id: str
    customer_id: str
    status: BookingStatus
    payment_status: PaymentStatus
    rent_total: Decimal
    security_deposit_total: Decimal
    cart_total: Decimal
    discounted_total: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    booking_date: datetime
    items: List[BookingItem] = field(default_factory=list)
    coupon_id: Optional[str] = None
    cancellation_charge: Decimal = Decimal("0.00")
    refund_amount: Decimal = Decimal("0.00")
    cancellation_reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "booking_id": self.booking_id,
            "customer_id": self.customer_id,
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "rent_total": str(self.rent_total),
            "security_deposit_total": str(self.security_deposit_total),
            "cart_total": str(self.cart_total),
            "discounted_total": str(self.discounted_total),
            "paid_amount": str(self.paid_amount),
            "remaining_amount": str(self.remaining_amount),
            "booking_date": self.booking_date.isoformat(),
            "items": [item.to_dict() for item in self.items],
            "coupon_id": self.coupon_id,
            "cancellation_charge": str(self.cancellation_charge),
            "refund_amount": str(self.refund_amount),
            "cancellation_reason": self.cancellation_reason
        }


@dataclass
class CancellationQuote:
    """Charge and refund for cancelling a booking at a given moment"""
    days_until_pickup: int
    charge_percentage: Decimal
    cancellation_charge: Decimal
    refundable_amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "days_until_pickup": self.days_until_pickup,
            "charge_percentage": str(self.charge_percentage),
            "cancellation_charge": str(self.cancellation_charge),
            "refundable_amount": str(self.refundable_amount)
        }
