"""
Cart service - handles cart operations
"""
import logging
import uuid
from datetime import date
from typing import Optional

from core.errors import ConcurrentUpdateError, ValidationError
from database.repository import CartRepository
from models.cart import Cart, CartItem
from .catalog_service import CatalogService
from .coupon_service import CouponService, apply_coupon, meets_minimum, validate_coupon
from .pricing import price_cart, rental_days, validate_quantity

logger = logging.getLogger(__name__)


class CartService:
    # Cart business logic: every mutation re-prices the cart and saves it

    def __init__(self, cart_repository: CartRepository, catalog_service: CatalogService,
                 coupon_service: CouponService, clock, enforce_coupon_window: bool = True):
        self.cart_repo = cart_repository
        self.catalog_service = catalog_service
        self.coupon_service = coupon_service
        self.clock = clock
        self.enforce_coupon_window = enforce_coupon_window

    def _reprice(self, cart: Cart) -> bool:
        # Recompute totals; returns True when the coupon had to be detached
        totals = price_cart(cart.items)
        detached = False

        if cart.coupon and not meets_minimum(cart.coupon, totals.cart_total):
            logger.info("Coupon %s detached from cart of %s: total %s below minimum %s",
                        cart.coupon.promo_code, cart.customer_id, totals.cart_total,
                        cart.coupon.minimum_cart_value)
            cart.coupon = None
            detached = True

        applied = apply_coupon(totals.cart_total, cart.coupon)
        totals.discount = applied.discount
        totals.discounted_total = applied.discounted_total
        cart.apply_totals(totals)
        return detached

    def _write(self, cart: Cart):
        try:
            self.cart_repo.save_cart(cart)
        except ConcurrentUpdateError:
            logger.warning("Stale write to cart of %s at version %d", cart.customer_id, cart.version)
            raise

    def _save(self, cart: Cart) -> Cart:
        self._reprice(cart)
        self._write(cart)
        return cart

    def get_cart(self, customer_id: str) -> Cart:
        # Current cart with totals; a coupon that no longer qualifies is dropped
        cart = self.cart_repo.load_cart(customer_id)
        if self._reprice(cart):
            self._write(cart)
        return cart

    def claim_cart(self, cart: Cart):
        # Empty a cart that is being checked out; fails if it changed since it was read
        cart.items = []
        cart.coupon = None
        self._save(cart)

    def add_or_update_item(self, customer_id: str, motorcycle_id: str, quantity: int = 1,
                           pickup_date: Optional[date] = None,
                           return_date: Optional[date] = None) -> Cart:
        # Add a motorcycle, or update quantity/dates if it is already in the cart
        validate_quantity(quantity)
        quantity = int(quantity)
        motorcycle = self.catalog_service.ensure_available(motorcycle_id, quantity)

        cart = self.cart_repo.load_cart(customer_id)
        item = cart.find_item(motorcycle_id)

        if item:
            new_pickup = pickup_date or item.pickup_date
            new_return = return_date or item.return_date
            rental_days(new_pickup, new_return)

            item.quantity = quantity
            item.pickup_date = new_pickup
            item.return_date = new_return
            item.rent_per_day = motorcycle.rent_per_day
            item.security_deposit = motorcycle.security_deposit
        else:
            if pickup_date is None or return_date is None:
                raise ValidationError("pickupDate and returnDate are required")
            rental_days(pickup_date, return_date)

            cart.items.append(CartItem(
                cart_item_id=str(uuid.uuid4()),
                motorcycle_id=motorcycle_id,
                quantity=quantity,
                pickup_date=pickup_date,
                return_date=return_date,
                rent_per_day=motorcycle.rent_per_day,
                security_deposit=motorcycle.security_deposit
            ))

        return self._save(cart)

    def remove_item(self, customer_id: str, motorcycle_id: str) -> Cart:
        # Drop a motorcycle; the coupon goes too if the cart falls below its minimum
        self.catalog_service.get_motorcycle(motorcycle_id)

        cart = self.cart_repo.load_cart(customer_id)
        cart.items = [item for item in cart.items if item.motorcycle_id != motorcycle_id]
        return self._save(cart)

    def apply_coupon(self, customer_id: str, promo_code: str) -> Cart:
        cart = self.cart_repo.load_cart(customer_id)
        coupon = self.coupon_service.find_by_code(promo_code)

        totals = price_cart(cart.items)
        validate_coupon(coupon, totals.cart_total, self.clock.now(), self.enforce_coupon_window)

        cart.coupon = coupon
        self._save(cart)
        logger.info("Coupon %s applied to cart of %s, discount %s",
                    coupon.promo_code, customer_id, cart.discount)
        return cart

    def remove_coupon(self, customer_id: str) -> Cart:
        cart = self.cart_repo.load_cart(customer_id)
        cart.coupon = None
        return self._save(cart)

    def clear_cart(self, customer_id: str) -> Cart:
        # Empty the cart and drop its coupon
        cart = self.cart_repo.load_cart(customer_id)
        cart.items = []
        cart.coupon = None
        return self._save(cart)
