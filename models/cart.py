"""
Cart related data models
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Dict, Any

from .coupon import Coupon


@dataclass
class CartItem:
    """Cart line item: one motorcycle over one date range"""
    cart_item_id: str
    motorcycle_id: str
    quantity: int
    pickup_date: date
    return_date: date
    rent_per_day: Decimal
    security_deposit: Decimal

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "cart_item_id": self.cart_item_id,
            "motorcycle_id": self.motorcycle_id,
            "quantity": self.quantity,
            "pickup_date": self.pickup_date.isoformat(),
            "return_date": self.return_date.isoformat(),
            "rent_per_day": str(self.rent_per_day),
            "security_deposit": str(self.security_deposit)
        }


@dataclass
class CartTotals:
    """Totals produced by the pricing calculator"""
    rent_total: Decimal
    security_deposit_total: Decimal
    cart_total: Decimal
    discount: Decimal = Decimal("0.00")
    discounted_total: Decimal = Decimal("0.00")


@dataclass
class Cart:
    """A customer's live cart with its priced snapshot"""
    customer_id: str
    items: List[CartItem] = field(default_factory=list)
    coupon: Optional[Coupon] = None
    version: int = 0
    rent_total: Decimal = Decimal("0.00")
    security_deposit_total: Decimal = Decimal("0.00")
    cart_total: Decimal = Decimal("0.00")
    discount: Decimal = Decimal("0.00")
    discounted_total: Decimal = Decimal("0.00")

    def find_item(self, motorcycle_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.motorcycle_id == motorcycle_id:
                return item
        return None

    def apply_totals(self, totals: CartTotals):
        self.rent_total = totals.rent_total
        self.security_deposit_total = totals.security_deposit_total
        self.cart_total = totals.cart_total
        self.discount = totals.discount
        self.discounted_total = totals.discounted_total

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "customer_id": self.customer_id,
            "items": [item.to_dict() for item in self.items],
            "coupon": self.coupon.to_dict() if self.coupon else None,
            "version": self.version,
            "rent_total": str(self.rent_total),
            "security_deposit_total": str(self.security_deposit_total),
            "cart_total": str(self.cart_total),
            "discount": str(self.discount),
            "discounted_total": str(self.discounted_total)
        }
