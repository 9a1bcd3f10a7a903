"""
Coupon (promo code) data models
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any


class CouponType(Enum):
    FLAT = "FLAT"
    PERCENTAGE = "PERCENTAGE"


@dataclass
class Coupon:
    """Coupon data model"""
    coupon_id: str
    promo_code: str
    type: CouponType
    discount_value: Decimal
    name: str = ""
    minimum_cart_value: Optional[Decimal] = None
    is_active: bool = True
    start_date: Optional[date] = None
    expiry_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "coupon_id": self.coupon_id,
            "name": self.name,
            "promo_code": self.promo_code,
            "type": self.type.value,
            "discount_value": str(self.discount_value),
            "minimum_cart_value": (str(self.minimum_cart_value)
                                   if self.minimum_cart_value is not None else None),
            "is_active": self.is_active,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None
        }


@dataclass
class CouponDiscount:
    """Result of applying a coupon to a cart total"""
    discount: Decimal
    discounted_total: Decimal
