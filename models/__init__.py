"""
Models package for the motorcycle rental desk
Contains data models and type definitions
"""

from .motorcycle import Motorcycle, MotorcycleRate
from .coupon import Coupon, CouponType, CouponDiscount
from .cart import Cart, CartItem, CartTotals
from .booking import Booking, BookingItem, BookingStatus, PaymentStatus, CancellationQuote

__all__ = [
    'Motorcycle', 'MotorcycleRate',
    'Coupon', 'CouponType', 'CouponDiscount',
    'Cart', 'CartItem', 'CartTotals',
    'Booking', 'BookingItem', 'BookingStatus', 'PaymentStatus', 'CancellationQuote'
]
