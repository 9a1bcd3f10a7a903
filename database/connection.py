"""
Database connection management
"""
import sqlite3
from contextlib import contextmanager
from typing import Generator


class DatabaseConnection:
    # Owns the SQLite file path and creates the schema on first use

    def __init__(self, db_path: str = "rental.db"):
        self.db_path = db_path
        self.init_database()

    def init_database(self):
        # Create every table the repositories need
        with self.get_connection() as conn:
            cursor = conn.cursor()

            # Fleet catalog; money columns hold decimal strings
            cursor.execute('''
            CREATE TABLE IF NOT EXISTS Motorcycles (
                motorcycle_id TEXT PRIMARY KEY,
                make TEXT NOT NULL,
                vehicle_model TEXT NOT NULL,
                rent_per_day TEXT NOT NULL,
                security_deposit TEXT NOT NULL,
                available_quantity INTEGER NOT NULL DEFAULT 0
            )
            ''')

            cursor.execute('''
            CREATE TABLE IF NOT EXISTS Coupons (
                coupon_id TEXT PRIMARY KEY,
                name TEXT,
                promo_code TEXT NOT NULL UNIQUE,
                type TEXT NOT NULL,
                discount_value TEXT NOT NULL,
                minimum_cart_value TEXT,
                is_active INTEGER NOT NULL DEFAULT 1,
                start_date TEXT,
                expiry_date TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            ''')

            # One cart header per customer; version guards against lost updates
            cursor.execute('''
            CREATE TABLE IF NOT EXISTS Carts (
                customer_id TEXT PRIMARY KEY,
                coupon_id TEXT,
                version INTEGER NOT NULL DEFAULT 0,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
            ''')

            cursor.execute('''
            CREATE TABLE IF NOT EXISTS Cart_Items (
                cart_item_id TEXT PRIMARY KEY,
                customer_id TEXT NOT NULL,
                motorcycle_id TEXT NOT NULL,
                quantity INTEGER NOT NULL DEFAULT 1,
                pickup_date TEXT NOT NULL,
                return_date TEXT NOT NULL,
                rent_per_day TEXT NOT NULL,
                security_deposit TEXT NOT NULL,
                position INTEGER NOT NULL DEFAULT 0,
                FOREIGN KEY(customer_id) REFERENCES Carts(customer_id)
            )
            ''')

            cursor.execute('''
            CREATE TABLE IF NOT EXISTS Bookings (
                booking_id TEXT PRIMARY KEY,
                customer_id TEXT NOT NULL,
                status TEXT NOT NULL DEFAULT 'PENDING',
                payment_status TEXT NOT NULL DEFAULT 'UNPAID',
                rent_total TEXT NOT NULL,
                security_deposit_total TEXT NOT NULL,
                cart_total TEXT NOT NULL,
                discounted_total TEXT NOT NULL,
                paid_amount TEXT NOT NULL,
                remaining_amount TEXT NOT NULL,
                coupon_id TEXT,
                cancellation_charge TEXT NOT NULL DEFAULT '0.00',
                refund_amount TEXT NOT NULL DEFAULT '0.00',
                cancellation_reason TEXT,
                booking_date TEXT NOT NULL
            )
            ''')

            cursor.execute('''
            CREATE TABLE IF NOT EXISTS Booking_Items (
                booking_item_id TEXT PRIMARY KEY,
                booking_id TEXT NOT NULL,
                motorcycle_id TEXT NOT NULL,
                quantity INTEGER NOT NULL,
                pickup_date TEXT NOT NULL,
                dropoff_date TEXT NOT NULL,
                rent_per_day TEXT NOT NULL,
                security_deposit TEXT NOT NULL,
                FOREIGN KEY(booking_id) REFERENCES Bookings(booking_id)
            )
            ''')

            conn.commit()

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        # Open a connection per operation and always close it
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()
