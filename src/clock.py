from datetime import datetime
from typing import Protocol

class Clock(Protocol):
    def now(self) -> datetime: ...

class SystemClock:
    """Wall-clock time in server-local naive datetimes, matching stored event dates"""

    def now(self) -> datetime:
        return datetime.now()

class FixedClock:
    """Clock pinned to a given instant; used by tests and one-off maintenance scripts"""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

system_clock = SystemClock()

def get_clock() -> Clock:
    return system_clock
