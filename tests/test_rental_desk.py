"""
Basic tests for rental desk wiring and settings
"""
import os
import tempfile
import unittest
from datetime import date
from decimal import Decimal
from unittest import mock

from core.config import Settings, load_settings
from core.errors import ConcurrentUpdateError, EmptyCart
from core.rental_desk import MotoRentalDesk
from init_db import STARTER_FLEET, seed_fleet


class TestMotoRentalDesk(unittest.TestCase):
    """Test cases for MotoRentalDesk"""

    def setUp(self):
        """Set up test database"""
        self.test_db = tempfile.NamedTemporaryFile(delete=False, suffix='.db')
        self.test_db.close()
        self.desk = MotoRentalDesk(Settings(db_path=self.test_db.name))
        self.customer_id = "test_customer"

    def tearDown(self):
        """Clean up test database"""
        os.unlink(self.test_db.name)

    def test_initialization(self):
        """Test that desk initializes correctly"""
        self.assertIsNotNone(self.desk.db_connection)
        self.assertIsNotNone(self.desk.catalog_service)
        self.assertIsNotNone(self.desk.coupon_service)
        self.assertIsNotNone(self.desk.cart_service)
        self.assertIsNotNone(self.desk.booking_service)

    def test_settings_reach_services(self):
        settings = Settings(db_path=self.test_db.name, cancellation_charge=Decimal("250"),
                            partial_payment_ratio=Decimal("0.3"), enforce_coupon_window=False)
        desk = MotoRentalDesk(settings)

        self.assertEqual(desk.booking_service.cancellation_charge, Decimal("250"))
        self.assertEqual(desk.booking_service.partial_payment_ratio, Decimal("0.3"))
        self.assertFalse(desk.cart_service.enforce_coupon_window)

    def test_empty_catalog(self):
        self.assertEqual(self.desk.catalog_service.list_motorcycles(), [])

    def test_empty_cart_details(self):
        cart = self.desk.cart_service.get_cart(self.customer_id)

        self.assertEqual(len(cart.items), 0)
        self.assertEqual(cart.cart_total, Decimal("0"))

    def test_clear_empty_cart(self):
        cart = self.desk.cart_service.clear_cart(self.customer_id)
        self.assertEqual(cart.items, [])

    def test_process_empty_cart_booking(self):
        with self.assertRaises(EmptyCart):
            self.desk.booking_service.create_booking(self.customer_id)

    def test_seed_fleet_is_idempotent(self):
        self.assertEqual(seed_fleet(self.desk.motorcycle_repo), len(STARTER_FLEET))
        self.assertEqual(seed_fleet(self.desk.motorcycle_repo), 0)
        self.assertEqual(len(self.desk.catalog_service.list_motorcycles()), len(STARTER_FLEET))

    def test_checkout_of_changed_cart_is_rejected(self):
        seed_fleet(self.desk.motorcycle_repo)
        cart = self.desk.cart_service.add_or_update_item(
            self.customer_id, "classic-350", 1, date(2025, 1, 10), date(2025, 1, 11)
        )
        self.desk.cart_service.add_or_update_item(self.customer_id, "classic-350", 2)

        with self.assertRaises(ConcurrentUpdateError):
            self.desk.cart_service.claim_cart(cart)
        self.assertEqual(self.desk.cart_service.get_cart(self.customer_id).items[0].quantity, 2)


class TestLoadSettings(unittest.TestCase):

    @mock.patch("core.config.load_dotenv")
    def test_defaults(self, _load_dotenv):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_settings()

        self.assertEqual(settings.db_path, "rental.db")
        self.assertEqual(settings.cancellation_charge, Decimal("199"))
        self.assertTrue(settings.enforce_coupon_window)
        self.assertEqual(settings.partial_payment_ratio, Decimal("0.2"))
        self.assertEqual(settings.port, 5000)
        self.assertFalse(settings.debug)

    @mock.patch("core.config.load_dotenv")
    def test_environment_overrides(self, _load_dotenv):
        env = {
            "DB_PATH": "/tmp/other.db",
            "CANCELLATION_CHARGE": "99.50",
            "ENFORCE_COUPON_WINDOW": "false",
            "PORT": "8080",
            "DEBUG": "1",
            "LOG_LEVEL": "debug",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = load_settings()

        self.assertEqual(settings.db_path, "/tmp/other.db")
        self.assertEqual(settings.cancellation_charge, Decimal("99.50"))
        self.assertFalse(settings.enforce_coupon_window)
        self.assertEqual(settings.port, 8080)
        self.assertTrue(settings.debug)
        self.assertEqual(settings.log_level, "DEBUG")


if __name__ == '__main__':
    unittest.main()
