"""
Clock implementations injected into the services
"""
from datetime import datetime


class SystemClock:
    """Wall clock"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock frozen at a given instant, movable by hand"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def set(self, instant: datetime):
        self.instant = instant
