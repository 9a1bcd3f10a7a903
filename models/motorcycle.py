"""
Motorcycle catalog data models
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Any


@dataclass
class MotorcycleRate:
    """Prices charged for one unit of a motorcycle"""
    rent_per_day: Decimal
    security_deposit: Decimal


@dataclass
class Motorcycle:
    """Motorcycle data model"""
    motorcycle_id: str
    make: str
    vehicle_model: str
    rent_per_day: Decimal
    security_deposit: Decimal
    available_quantity: int = 0

    @property
    def rate(self) -> MotorcycleRate:
        return MotorcycleRate(rent_per_day=self.rent_per_day,
                              security_deposit=self.security_deposit)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "motorcycle_id": self.motorcycle_id,
            "make": self.make,
            "vehicle_model": self.vehicle_model,
            "rent_per_day": str(self.rent_per_day),
            "security_deposit": str(self.security_deposit),
            "available_quantity": self.available_quantity
        }
