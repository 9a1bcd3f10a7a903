"""
Exceptions raised by the rental desk
Each error carries the HTTP status the API layer answers with
"""
from decimal import Decimal
from typing import Optional


class RentalError(Exception):
    """Base exception for all rental desk errors."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# --- Validation errors (400) ---

class ValidationError(RentalError):
    """Raised when a request carries invalid values."""

    status_code = 400


class InvalidDateRange(ValidationError):
    """Raised when a return date falls before its pickup date."""

    def __init__(self, pickup_date, return_date):
        self.pickup_date = pickup_date
        self.return_date = return_date
        super().__init__(
            f"Return date {return_date} is before pickup date {pickup_date}"
        )


class InvalidQuantity(ValidationError):
    """Raised when a quantity is below one."""

    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__("Quantity must be minimum 1")


class InvalidCouponData(ValidationError):
    pass


class EmptyCart(ValidationError):
    def __init__(self):
        super().__init__("Your cart is empty")


class InsufficientStock(ValidationError):
    """Raised when more motorcycles are requested than are available."""

    def __init__(self, motorcycle_id: str, available: int):
        self.motorcycle_id = motorcycle_id
        self.available = available
        if available > 0:
            msg = f"Only {available} motorcycles available"
        else:
            msg = "Motorcycle is out of stock"
        super().__init__(msg)


# --- Not-found errors (404) ---

class NotFoundError(RentalError):
    status_code = 404


class MotorcycleNotFound(NotFoundError):
    def __init__(self, motorcycle_id: str):
        self.motorcycle_id = motorcycle_id
        super().__init__(f"Motorcycle not found: {motorcycle_id}")


class BookingNotFound(NotFoundError):
    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        super().__init__(f"Booking not found: {booking_id}")


# --- Coupon errors ---

class CouponError(RentalError):
    """Base class for coupon rejections."""

    status_code = 400


class CouponNotFound(CouponError):
    status_code = 404

    def __init__(self, code: Optional[str] = None):
        self.code = code
        msg = "Coupon does not exist"
        if code:
            msg = f"Coupon does not exist: {code}"
        super().__init__(msg)


class CouponInactive(CouponError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Coupon {code} is not active")


class CouponExpired(CouponError):
    """Raised when the coupon is used outside its start/expiry window."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Coupon {code} is not valid at this time")


class CouponMinimumNotMet(CouponError):
    """Raised when the cart total is below the coupon's minimum cart value."""

    def __init__(self, code: str, minimum: Decimal, shortfall: Decimal):
        self.code = code
        self.minimum = minimum
        self.shortfall = shortfall
        super().__init__(
            f"Add items worth {shortfall} more to use coupon {code} "
            f"(minimum cart value {minimum})"
        )


class DuplicateCoupon(CouponError):
    status_code = 409

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Coupon with code {code} already exists")


# --- State errors (409) ---

class StateError(RentalError):
    status_code = 409


class InvalidStatusTransition(StateError):
    """Raised when a booking status change is not allowed."""

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot change booking status from {from_status} to {to_status}")


class InvalidPaymentStatusTransition(StateError):
    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot change payment status from {from_status} to {to_status}")


class ConcurrentUpdateError(StateError):
    """Raised when a cart was modified by another request since it was loaded."""

    def __init__(self, customer_id: str, expected_version: int):
        self.customer_id = customer_id
        self.expected_version = expected_version
        super().__init__("Cart was modified by another request, please retry")


# --- Authorization errors (403) ---

class AuthorizationError(RentalError):
    status_code = 403

    def __init__(self, message: str = "Unauthorized action"):
        super().__init__(message)
