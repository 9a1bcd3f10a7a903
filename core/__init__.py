"""
Core package for the motorcycle rental desk
Contains settings, errors, clocks and the service wiring (core.rental_desk)
"""

from .config import Settings, load_settings
from .clock import SystemClock, FixedClock

__all__ = [
    'Settings', 'load_settings', 'SystemClock', 'FixedClock'
]
