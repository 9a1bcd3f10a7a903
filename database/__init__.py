"""
Database package for the motorcycle rental desk
Contains database connection and repository classes
"""

from .connection import DatabaseConnection
from .repository import MotorcycleRepository, CouponRepository, CartRepository, BookingRepository

__all__ = [
    'DatabaseConnection',
    'MotorcycleRepository', 'CouponRepository', 'CartRepository', 'BookingRepository'
]
