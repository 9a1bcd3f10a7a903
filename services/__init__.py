"""
Services package for the motorcycle rental desk
Contains business logic services
"""

from .catalog_service import CatalogService
from .coupon_service import CouponService
from .cart_service import CartService
from .booking_service import BookingService
from .booking_lifecycle import BookingLifecycle

__all__ = [
    'CatalogService', 'CouponService', 'CartService', 'BookingService', 'BookingLifecycle'
]
