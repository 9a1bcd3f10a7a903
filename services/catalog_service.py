"""
Catalog service - motorcycle lookup, rates and stock
"""
import logging
from typing import List

from core.errors import MotorcycleNotFound, InsufficientStock
from database.repository import MotorcycleRepository
from models.motorcycle import Motorcycle, MotorcycleRate

logger = logging.getLogger(__name__)


class CatalogService:
    # Read side of the fleet plus the stock counter moves done at checkout/cancel

    def __init__(self, motorcycle_repository: MotorcycleRepository):
        self.motorcycle_repo = motorcycle_repository

    def get_motorcycle(self, motorcycle_id: str) -> Motorcycle:
        motorcycle = self.motorcycle_repo.get_motorcycle(motorcycle_id)
        if motorcycle is None:
            raise MotorcycleNotFound(motorcycle_id)
        return motorcycle

    def get_motorcycle_rate(self, motorcycle_id: str) -> MotorcycleRate:
        return self.get_motorcycle(motorcycle_id).rate

    def list_motorcycles(self) -> List[Motorcycle]:
        return self.motorcycle_repo.list_motorcycles()

    def ensure_available(self, motorcycle_id: str, quantity: int) -> Motorcycle:
        # Quantity must not exceed what the fleet currently has on hand
        motorcycle = self.get_motorcycle(motorcycle_id)
        if motorcycle.available_quantity < quantity:
            raise InsufficientStock(motorcycle_id, motorcycle.available_quantity)
        return motorcycle

    def reserve(self, motorcycle_id: str, quantity: int):
        # Stock is checked again here: another checkout may have taken the units since carting
        if not self.motorcycle_repo.take_stock(motorcycle_id, quantity):
            motorcycle = self.get_motorcycle(motorcycle_id)
            logger.warning("Cannot reserve %d x %s, %d left", quantity, motorcycle_id,
                           motorcycle.available_quantity)
            raise InsufficientStock(motorcycle_id, motorcycle.available_quantity)
        logger.info("Reserved %d x %s", quantity, motorcycle_id)

    def reserve_all(self, quantities):
        # Reserve every (motorcycle_id, quantity) pair or none of them
        reserved = []
        try:
            for motorcycle_id, quantity in quantities:
                self.reserve(motorcycle_id, quantity)
                reserved.append((motorcycle_id, quantity))
        except InsufficientStock:
            for motorcycle_id, quantity in reserved:
                self.release(motorcycle_id, quantity)
            raise

    def release(self, motorcycle_id: str, quantity: int):
        self.motorcycle_repo.adjust_stock(motorcycle_id, quantity)
        logger.info("Released %d x %s", quantity, motorcycle_id)
