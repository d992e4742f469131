"""
Admin Module

Back-office operations on bookings, available to callers presenting the
admin key (``X-Admin-Key``). It includes:

- Recording cash bookings taken at the office (offline_service.py)
- Per-trek and per-tour booking reports with totals (stats_service.py)
- Cross-event overview of treks and tours with booking counts and revenue
- Clearing bookings of concluded events, guarded against paid bookings
- Running the ended-event cleanup sweep on demand

Every endpoint depends on ``require_admin``, which yields the
``AdminContext`` the handlers receive.
"""

from . import router, schemas, dependencies, offline_service, stats_service

__all__ = [
    "router",
    "schemas",
    "dependencies",
    "offline_service",
    "stats_service"
]
