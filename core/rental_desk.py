"""
Main MotoRentalDesk class - wires repositories and services together
"""
from typing import Optional

from database.connection import DatabaseConnection
from database.repository import (
    MotorcycleRepository,
    CouponRepository,
    CartRepository,
    BookingRepository,
)
from services.catalog_service import CatalogService
from services.coupon_service import CouponService
from services.cart_service import CartService
from services.booking_service import BookingService
from .clock import SystemClock
from .config import Settings, load_settings


class MotoRentalDesk:
    # Central object handed to the API layer; owns one instance of every service

    def __init__(self, settings: Optional[Settings] = None, clock=None):
        self.settings = settings or load_settings()
        self.clock = clock or SystemClock()

        # Database connection
        self.db_connection = DatabaseConnection(self.settings.db_path)

        # Repository layer (data access)
        self.motorcycle_repo = MotorcycleRepository(self.db_connection)
        self.coupon_repo = CouponRepository(self.db_connection)
        self.cart_repo = CartRepository(self.db_connection)
        self.booking_repo = BookingRepository(self.db_connection)

        # Service layer (business logic)
        self.catalog_service = CatalogService(self.motorcycle_repo)
        self.coupon_service = CouponService(self.coupon_repo)
        self.cart_service = CartService(
            self.cart_repo, self.catalog_service, self.coupon_service, self.clock,
            enforce_coupon_window=self.settings.enforce_coupon_window
        )
        self.booking_service = BookingService(
            self.booking_repo, self.cart_service, self.catalog_service, self.clock,
            cancellation_charge=self.settings.cancellation_charge,
            partial_payment_ratio=self.settings.partial_payment_ratio
        )
