"""
Database repository classes
"""
import sqlite3
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from core.errors import ConcurrentUpdateError, DuplicateCoupon
from models.motorcycle import Motorcycle
from models.coupon import Coupon, CouponType
from models.cart import Cart, CartItem
from models.booking import Booking, BookingItem, BookingStatus, PaymentStatus
from .connection import DatabaseConnection


def _money(value: Optional[str]) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None


def _day(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


_COUPON_COLUMNS = """
coupon_id, name, promo_code, type, discount_value, minimum_cart_value,
is_active, start_date, expiry_date
"""


def _row_to_coupon(row) -> Coupon:
    return Coupon(
        coupon_id=row[0],
        name=row[1] or "",
        promo_code=row[2],
        type=CouponType(row[3]),
        discount_value=Decimal(row[4]),
        minimum_cart_value=_money(row[5]),
        is_active=bool(row[6]),
        start_date=_day(row[7]),
        expiry_date=_day(row[8])
    )


class MotorcycleRepository:
    # Catalog data access (fleet records and stock counts)

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection

    def add_motorcycle(self, motorcycle: Motorcycle):
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
            INSERT INTO Motorcycles (
                motorcycle_id, make, vehicle_model, rent_per_day, security_deposit, available_quantity
            ) VALUES (?, ?, ?, ?, ?, ?)
            """, (
                motorcycle.motorcycle_id, motorcycle.make, motorcycle.vehicle_model,
                str(motorcycle.rent_per_day), str(motorcycle.security_deposit),
                motorcycle.available_quantity
            ))
            conn.commit()

    def get_motorcycle(self, motorcycle_id: str) -> Optional[Motorcycle]:
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
            SELECT motorcycle_id, make, vehicle_model, rent_per_day, security_deposit, available_quantity
            FROM Motorcycles WHERE motorcycle_id = ?
            """, (motorcycle_id,))

            row = cursor.fetchone()
            if row:
                return Motorcycle(
                    motorcycle_id=row[0],
                    make=row[1],
                    vehicle_model=row[2],
                    rent_per_day=Decimal(row[3]),
                    security_deposit=Decimal(row[4]),
                    available_quantity=row[5]
                )
            return None

    def list_motorcycles(self) -> List[Motorcycle]:
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT motorcycle_id FROM Motorcycles ORDER BY make, vehicle_model")
            ids = [row[0] for row in cursor.fetchall()]
        return [self.get_motorcycle(motorcycle_id) for motorcycle_id in ids]

    def adjust_stock(self, motorcycle_id: str, delta: int):
        # Positive delta returns units to the fleet, negative takes them out
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
            UPDATE Motorcycles SET available_quantity = available_quantity + ?
            WHERE motorcycle_id = ?
            """, (delta, motorcycle_id))
            conn.commit()

    def take_stock(self, motorcycle_id: str, quantity: int) -> bool:
        # Decrement only while enough units remain; False when the fleet ran short
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
            UPDATE Motorcycles SET available_quantity = available_quantity - ?
            WHERE motorcycle_id = ? AND available_quantity >= ?
            """, (quantity, motorcycle_id, quantity))
            taken = cursor.rowcount > 0
            conn.commit()
            return taken


class CouponRepository:
    # Promo code data access

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection

    def get_by_id(self, coupon_id: str) -> Optional[Coupon]:
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COUPON_COLUMNS} FROM Coupons WHERE coupon_id = ?", (coupon_id,))
            row = cursor.fetchone()
            return _row_to_coupon(row) if row else None

    def get_by_code(self, promo_code: str) -> Optional[Coupon]:
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COUPON_COLUMNS} FROM Coupons WHERE promo_code = ?", (promo_code,))
            row = cursor.fetchone()
            return _row_to_coupon(row) if row else None

    def list_coupons(self, active: Optional[bool] = None) -> List[Coupon]:
        sql = f"SELECT {_COUPON_COLUMNS} FROM Coupons"
        params = []
        if active is not None:
            sql += " WHERE is_active = ?"
            params.append(int(active))
        sql += " ORDER BY created_at DESC, promo_code"

        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, params)
            return [_row_to_coupon(row) for row in cursor.fetchall()]

    def save_coupon(self, coupon: Coupon):
        # Insert or overwrite; the UNIQUE promo_code constraint backs the service's duplicate check
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute("""
                INSERT INTO Coupons (
                    coupon_id, name, promo_code, type, discount_value, minimum_cart_value,
                    is_active, start_date, expiry_date
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(coupon_id) DO UPDATE SET
                    name = excluded.name,
                    promo_code = excluded.promo_code,
                    type = excluded.type,
                    discount_value = excluded.discount_value,
                    minimum_cart_value = excluded.minimum_cart_value,
                    is_active = excluded.is_active,
                    start_date = excluded.start_date,
                    expiry_date = excluded.expiry_date
                """, (
                    coupon.coupon_id, coupon.name, coupon.promo_code, coupon.type.value,
                    str(coupon.discount_value),
                    str(coupon.minimum_cart_value) if coupon.minimum_cart_value is not None else None,
                    int(coupon.is_active), _iso(coupon.start_date), _iso(coupon.expiry_date)
                ))
            except sqlite3.IntegrityError as e:
                raise DuplicateCoupon(coupon.promo_code) from e
            conn.commit()

    def delete_coupon(self, coupon_id: str) -> bool:
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            # Detach from carts so they do not point at a missing coupon
            cursor.execute("UPDATE Carts SET coupon_id = NULL WHERE coupon_id = ?", (coupon_id,))
            cursor.execute("DELETE FROM Coupons WHERE coupon_id = ?", (coupon_id,))
            removed = cursor.rowcount
            conn.commit()
            return removed > 0


class CartRepository:
    # Cart data access (one cart per customer, versioned saves)

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection

    def load_cart(self, customer_id: str) -> Cart:
        # Unknown customers get an empty cart at version 0
        with self.db.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("SELECT coupon_id, version FROM Carts WHERE customer_id = ?", (customer_id,))
            header = cursor.fetchone()
            if not header:
                return Cart(customer_id=customer_id)

            coupon = None
            if header[0]:
                cursor.execute(f"SELECT {_COUPON_COLUMNS} FROM Coupons WHERE coupon_id = ?", (header[0],))
                coupon_row = cursor.fetchone()
                coupon = _row_to_coupon(coupon_row) if coupon_row else None

            cursor.execute("""
            SELECT cart_item_id, motorcycle_id, quantity, pickup_date, return_date,
                   rent_per_day, security_deposit
            FROM Cart_Items WHERE customer_id = ?
            ORDER BY position
            """, (customer_id,))

            items = []
            for row in cursor.fetchall():
                items.append(CartItem(
                    cart_item_id=row[0],
                    motorcycle_id=row[1],
                    quantity=row[2],
                    pickup_date=_day(row[3]),
                    return_date=_day(row[4]),
                    rent_per_day=Decimal(row[5]),
                    security_deposit=Decimal(row[6])
                ))

            return Cart(customer_id=customer_id, items=items, coupon=coupon, version=header[1])

    def save_cart(self, cart: Cart):
        # Compare-and-swap on version: only the writer holding the latest version wins
        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            coupon_id = cart.coupon.coupon_id if cart.coupon else None

            if cart.version == 0:
                cursor.execute("""
                INSERT OR IGNORE INTO Carts (customer_id, coupon_id, version)
                VALUES (?, ?, 1)
                """, (cart.customer_id, coupon_id))
            else:
                cursor.execute("""
                UPDATE Carts SET coupon_id = ?, version = version + 1, updated_at = CURRENT_TIMESTAMP
                WHERE customer_id = ? AND version = ?
                """, (coupon_id, cart.customer_id, cart.version))

            if cursor.rowcount == 0:
                raise ConcurrentUpdateError(cart.customer_id, cart.version)

            # Items are rewritten wholesale inside the same transaction
            cursor.execute("DELETE FROM Cart_Items WHERE customer_id = ?", (cart.customer_id,))
            for position, item in enumerate(cart.items):
                cursor.execute("""
                INSERT INTO Cart_Items (
                    cart_item_id, customer_id, motorcycle_id, quantity, pickup_date, return_date,
                    rent_per_day, security_deposit, position
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    item.cart_item_id, cart.customer_id, item.motorcycle_id, item.quantity,
                    _iso(item.pickup_date), _iso(item.return_date),
                    str(item.rent_per_day), str(item.security_deposit), position
                ))

            conn.commit()

        cart.version += 1


class BookingRepository:
    # Booking data access (booking header + booked items)

    def __init__(self, db_connection: DatabaseConnection):
        self.db = db_connection

    def save_booking(self, booking: Booking):
        # Insert or overwrite the booking; items are rewritten with it
        with self.db.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
            INSERT OR REPLACE INTO Bookings (
                booking_id, customer_id, status, payment_status, rent_total, security_deposit_total,
                cart_total, discounted_total, paid_amount, remaining_amount, coupon_id,
                cancellation_charge, refund_amount, cancellation_reason, booking_date
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                booking.booking_id, booking.customer_id, booking.status.value,
                booking.payment_status.value, str(booking.rent_total),
                str(booking.security_deposit_total), str(booking.cart_total),
                str(booking.discounted_total), str(booking.paid_amount),
                str(booking.remaining_amount), booking.coupon_id,
                str(booking.cancellation_charge), str(booking.refund_amount),
                booking.cancellation_reason, booking.booking_date.isoformat()
            ))

            cursor.execute("DELETE FROM Booking_Items WHERE booking_id = ?", (booking.booking_id,))
            for item in booking.items:
                cursor.execute("""
                INSERT INTO Booking_Items (
                    booking_item_id, booking_id, motorcycle_id, quantity, pickup_date,
                    dropoff_date, rent_per_day, security_deposit
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    item.booking_item_id, booking.booking_id, item.motorcycle_id, item.quantity,
                    _iso(item.pickup_date), _iso(item.dropoff_date),
                    str(item.rent_per_day), str(item.security_deposit)
                ))

            conn.commit()

    def load_booking(self, booking_id: str) -> Optional[Booking]:
        with self.db.get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
            SELECT booking_id, customer_id, status, payment_status, rent_total,
                   security_deposit_total, cart_total, discounted_total, paid_amount,
                   remaining_amount, coupon_id, cancellation_charge, refund_amount,
                   cancellation_reason, booking_date
            FROM Bookings WHERE booking_id = ?
            """, (booking_id,))

            row = cursor.fetchone()
            if not row:
                return None

            cursor.execute("""
            SELECT booking_item_id, motorcycle_id, quantity, pickup_date, dropoff_date,
                   rent_per_day, security_deposit
            FROM Booking_Items WHERE booking_id = ?
            ORDER BY pickup_date, booking_item_id
            """, (booking_id,))

            items = []
            for item_row in cursor.fetchall():
                items.append(BookingItem(
                    booking_item_id=item_row[0],
                    booking_id=booking_id,
                    motorcycle_id=item_row[1],
                    quantity=item_row[2],
                    pickup_date=_day(item_row[3]),
                    dropoff_date=_day(item_row[4]),
                    rent_per_day=Decimal(item_row[5]),
                    security_deposit=Decimal(item_row[6])
                ))

            return Booking(
                booking_id=row[0],
                customer_id=row[1],
                status=BookingStatus(row[2]),
                payment_status=PaymentStatus(row[3]),
                rent_total=Decimal(row[4]),
                security_deposit_total=Decimal(row[5]),
                cart_total=Decimal(row[6]),
                discounted_total=Decimal(row[7]),
                paid_amount=Decimal(row[8]),
                remaining_amount=Decimal(row[9]),
                coupon_id=row[10],
                cancellation_charge=Decimal(row[11]),
                refund_amount=Decimal(row[12]),
                cancellation_reason=row[13],
                booking_date=datetime.fromisoformat(row[14]),
                items=items
            )

    def list_bookings(self, customer_id: Optional[str] = None,
                      status: Optional[BookingStatus] = None) -> List[Booking]:
        # Filter by customer and/or status, newest first
        sql = "SELECT booking_id FROM Bookings WHERE 1 = 1"
        params = []
        if customer_id:
            sql += " AND customer_id = ?"
            params.append(customer_id)
        if status:
            sql += " AND status = ?"
            params.append(status.value)
        sql += " ORDER BY booking_date DESC"

        with self.db.get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(sql, params)
            booking_ids = [row[0] for row in cursor.fetchall()]

        return [self.load_booking(booking_id) for booking_id in booking_ids]
