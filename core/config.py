"""
Runtime settings loaded from the environment (.env supported)
"""
import os
from dataclasses import dataclass
from decimal import Decimal

from dotenv import load_dotenv


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Rental desk settings"""
    db_path: str = "rental.db"
    cancellation_charge: Decimal = Decimal("199")
    enforce_coupon_window: bool = True
    partial_payment_ratio: Decimal = Decimal("0.2")
    secret_key: str = "change-me"
    port: int = 5000
    debug: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    # Values already present in the environment win over .env
    load_dotenv()

    return Settings(
        db_path=os.getenv("DB_PATH", "rental.db"),
        cancellation_charge=Decimal(os.getenv("CANCELLATION_CHARGE", "199")),
        enforce_coupon_window=_env_flag("ENFORCE_COUPON_WINDOW", "true"),
        partial_payment_ratio=Decimal(os.getenv("PARTIAL_PAYMENT_RATIO", "0.2")),
        secret_key=os.getenv("SECRET_KEY", "change-me"),
        port=int(os.getenv("PORT", 5000)),
        debug=_env_flag("DEBUG", "false"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
