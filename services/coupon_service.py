"""
Coupon evaluator and coupon administration
"""
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Any, Optional

from core.errors import (
    CouponNotFound,
    CouponInactive,
    CouponExpired,
    CouponMinimumNotMet,
    DuplicateCoupon,
    InvalidCouponData,
)
from database.repository import CouponRepository
from models.coupon import Coupon, CouponType, CouponDiscount
from .pricing import to_money, ZERO

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def normalize_code(promo_code: str) -> str:
    return (promo_code or "").strip().upper()


def validate_coupon(coupon: Optional[Coupon], cart_total: Decimal, now: datetime,
                    enforce_window: bool = True):
    """Check that a coupon may be applied to a cart of the given total.

    Checks run in a fixed order and the first failure is raised: existence,
    active flag, start/expiry window (when enforced), minimum cart value.
    """
    if coupon is None:
        raise CouponNotFound()

    if not coupon.is_active:
        raise CouponInactive(coupon.promo_code)

    if enforce_window:
        today = now.date()
        if coupon.start_date and today < coupon.start_date:
            raise CouponExpired(coupon.promo_code)
        if coupon.expiry_date and today > coupon.expiry_date:
            raise CouponExpired(coupon.promo_code)

    minimum = coupon.minimum_cart_value
    if minimum is not None and cart_total < minimum:
        raise CouponMinimumNotMet(coupon.promo_code, minimum, to_money(minimum - cart_total))


def discount_for(cart_total: Decimal, coupon: Optional[Coupon]) -> Decimal:
    if coupon is None:
        return ZERO
    if coupon.type == CouponType.FLAT:
        return to_money(min(coupon.discount_value, cart_total))
    return to_money(cart_total * coupon.discount_value / HUNDRED)


def apply_coupon(cart_total: Decimal, coupon: Optional[Coupon]) -> CouponDiscount:
    # Discounted total never drops below zero
    discount = discount_for(cart_total, coupon)
    discounted_total = max(to_money(cart_total - discount), ZERO)
    return CouponDiscount(discount=discount, discounted_total=discounted_total)


def meets_minimum(coupon: Coupon, cart_total: Decimal) -> bool:
    return coupon.minimum_cart_value is None or cart_total >= coupon.minimum_cart_value


def _parse_money(value: Any, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidCouponData(f"{field_name} must be a number") from e
    if not amount.is_finite():
        raise InvalidCouponData(f"{field_name} must be a number")
    return to_money(amount)


def _parse_day(value: Any, field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as e:
        raise InvalidCouponData(f"{field_name} must be an ISO date") from e


def _parse_type(value: Any) -> CouponType:
    try:
        return CouponType(str(value).upper())
    except ValueError as e:
        raise InvalidCouponData("type must be FLAT or PERCENTAGE") from e


def check_coupon_rules(coupon: Coupon):
    # Admin-side invariants, re-checked on every create and update
    if not coupon.promo_code:
        raise InvalidCouponData("promoCode is required")
    if coupon.discount_value <= ZERO:
        raise InvalidCouponData("Discount value must be greater than 0")
    if coupon.type == CouponType.PERCENTAGE and coupon.discount_value > HUNDRED:
        raise InvalidCouponData("Percentage discount cannot exceed 100")
    if coupon.minimum_cart_value is not None:
        if coupon.minimum_cart_value < ZERO:
            raise InvalidCouponData("Minimum cart value cannot be negative")
        if coupon.minimum_cart_value < coupon.discount_value:
            raise InvalidCouponData(
                "Minimum cart value must be greater than or equal to the discount value"
            )
    if coupon.start_date and coupon.expiry_date and coupon.start_date > coupon.expiry_date:
        raise InvalidCouponData("Start date must be on or before the expiry date")


class CouponService:
    # Coupon lookup for the cart and coupon CRUD for admins

    def __init__(self, coupon_repository: CouponRepository):
        self.coupon_repo = coupon_repository

    def find_by_code(self, promo_code: str) -> Coupon:
        code = normalize_code(promo_code)
        coupon = self.coupon_repo.get_by_code(code) if code else None
        if coupon is None:
            raise CouponNotFound(code)
        return coupon

    def get_coupon(self, coupon_id: str) -> Coupon:
        coupon = self.coupon_repo.get_by_id(coupon_id)
        if coupon is None:
            raise CouponNotFound()
        return coupon

    def list_coupons(self, active: Optional[bool] = None) -> List[Coupon]:
        return self.coupon_repo.list_coupons(active)

    def create_coupon(self, data: Dict[str, Any]) -> Coupon:
        # New coupons default to FLAT and active, like the admin form
        if data.get("discountValue") is None:
            raise InvalidCouponData("discountValue is required")

        is_active = data.get("isActive", True)
        if not isinstance(is_active, bool):
            raise InvalidCouponData("isActive must be true or false")

        minimum = data.get("minimumCartValue")
        coupon = Coupon(
            coupon_id=str(uuid.uuid4()),
            name=data.get("name") or "",
            promo_code=normalize_code(data.get("promoCode")),
            type=_parse_type(data.get("type") or CouponType.FLAT.value),
            discount_value=_parse_money(data["discountValue"], "discountValue"),
            minimum_cart_value=_parse_money(minimum, "minimumCartValue") if minimum not in (None, "") else None,
            is_active=is_active,
            start_date=_parse_day(data.get("startDate"), "startDate"),
            expiry_date=_parse_day(data.get("expiryDate"), "expiryDate")
        )
        check_coupon_rules(coupon)

        if self.coupon_repo.get_by_code(coupon.promo_code):
            raise DuplicateCoupon(coupon.promo_code)

        self.coupon_repo.save_coupon(coupon)
        logger.info("Coupon %s created (%s %s)", coupon.promo_code,
                    coupon.type.value, coupon.discount_value)
        return coupon

    def update_coupon(self, coupon_id: str, data: Dict[str, Any]) -> Coupon:
        # Fields left out of the payload keep their stored values
        coupon = self.get_coupon(coupon_id)

        if data.get("promoCode"):
            code = normalize_code(data["promoCode"])
            existing = self.coupon_repo.get_by_code(code)
            if existing and existing.coupon_id != coupon.coupon_id:
                raise DuplicateCoupon(code)
            coupon.promo_code = code
        if "name" in data:
            coupon.name = data["name"] or ""
        if data.get("type"):
            coupon.type = _parse_type(data["type"])
        if data.get("discountValue") not in (None, ""):
            coupon.discount_value = _parse_money(data["discountValue"], "discountValue")
        if "minimumCartValue" in data:
            # An explicit null or empty value removes the minimum
            minimum = data["minimumCartValue"]
            coupon.minimum_cart_value = (
                None if minimum in (None, "") else _parse_money(minimum, "minimumCartValue")
            )
        if "startDate" in data:
            coupon.start_date = _parse_day(data["startDate"], "startDate")
        if "expiryDate" in data:
            coupon.expiry_date = _parse_day(data["expiryDate"], "expiryDate")

        check_coupon_rules(coupon)
        self.coupon_repo.save_coupon(coupon)
        logger.info("Coupon %s updated", coupon.promo_code)
        return coupon

    def set_coupon_active(self, coupon_id: str, is_active: bool) -> Coupon:
        coupon = self.get_coupon(coupon_id)
        coupon.is_active = bool(is_active)
        self.coupon_repo.save_coupon(coupon)
        logger.info("Coupon %s is %s", coupon.promo_code, "active" if coupon.is_active else "inactive")
        return coupon

    def delete_coupon(self, coupon_id: str):
        if not self.coupon_repo.delete_coupon(coupon_id):
            raise CouponNotFound()
        logger.info("Coupon %s deleted", coupon_id)
