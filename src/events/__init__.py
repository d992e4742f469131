"""
Event catalog (read side).

Treks and tours are managed by the catalog administration screens; the booking
core only needs to read them. ``EventCatalogService`` exposes that narrow
interface and ``EventRef`` is the tagged trek/tour reference carried by every
booking.
"""

from .service import EventCatalogService
from .schemas import EventKind, EventRef, EventSnapshot, EventSort, CityPrice

__all__ = [
    "EventCatalogService",
    "EventKind",
    "EventRef",
    "EventSnapshot",
    "EventSort",
    "CityPrice"
]
