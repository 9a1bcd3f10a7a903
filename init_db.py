#!/usr/bin/env python3
"""
Database initialization script
Creates the tables and loads a starter fleet into the configured database.
"""
import logging
from decimal import Decimal

from core.config import load_settings
from database.connection import DatabaseConnection
from database.repository import MotorcycleRepository
from models.motorcycle import Motorcycle

logger = logging.getLogger(__name__)

STARTER_FLEET = [
    Motorcycle("classic-350", "Royal Enfield", "Classic 350", Decimal("500"), Decimal("1000"), 5),
    Motorcycle("himalayan-450", "Royal Enfield", "Himalayan 450", Decimal("900"), Decimal("2000"), 3),
    Motorcycle("duke-390", "KTM", "390 Duke", Decimal("1100"), Decimal("2500"), 2),
    Motorcycle("activa-6g", "Honda", "Activa 6G", Decimal("300"), Decimal("500"), 10),
]


def seed_fleet(motorcycle_repo: MotorcycleRepository, fleet=STARTER_FLEET) -> int:
    """Add every motorcycle not already in the catalog; returns how many were added"""
    added = 0
    for motorcycle in fleet:
        if motorcycle_repo.get_motorcycle(motorcycle.motorcycle_id):
            continue
        motorcycle_repo.add_motorcycle(motorcycle)
        added += 1
    logger.info("Seeded %d motorcycles", added)
    return added


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    settings = load_settings()

    print("=== Motorcycle Rental Desk database initialization ===")
    repo = MotorcycleRepository(DatabaseConnection(settings.db_path))
    count = seed_fleet(repo)

    print(f"Database ready at {settings.db_path}")
    print(f"Motorcycles added: {count}, in catalog: {len(repo.list_motorcycles())}")
    print("\nYou can now start the API with: python app.py")
