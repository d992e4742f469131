from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from src.events.schemas import EventKind, EventSort
from src.exceptions import InvalidStatusFilter
from src.bookings.schemas import (
    CamelModel, BookingRecord, EventBookingStats, NotificationStatus, PaymentStatus
)

class DateStatus(str, Enum):
    """Where an event sits relative to now"""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    ALL = "all"

# Offline bookings
class OfflineBookingResult(CamelModel):
    """Cash booking recorded by an administrator"""
    booking: BookingRecord
    event_name: str
    event_kind: EventKind
    notification_status: NotificationStatus

# Per-event detail
class EventHeader(CamelModel):
    id: str
    name: str
    kind: EventKind
    start_date: datetime
    end_date: datetime
    is_active: bool

class EventBookingsSummary(CamelModel):
    total_members: int = 0
    total_revenue: Decimal = Decimal("0.00")

class EventBookingsMeta(CamelModel):
    total_bookings: int
    current_page: int
    total_pages: int
    bookings_count: int
    status_filter: str

class EventBookingsDetail(CamelModel):
    """Bookings of one trek or tour with totals and pagination"""
    event: EventHeader
    bookings: List[BookingRecord]
    summary: EventBookingsSummary
    meta: EventBookingsMeta

# Cross-event overview
class EventOverviewRow(EventBookingStats):
    """One trek or tour with its booking totals"""
    id: str
    name: str
    kind: EventKind
    start_date: datetime
    end_date: datetime
    is_active: bool
    status: DateStatus

class OverviewPagination(CamelModel):
    current_page: int
    total_pages: int
    total_events: int
    limit: int

class EventsOverview(CamelModel):
    events: List[EventOverviewRow]
    pagination: OverviewPagination
    status_filter: DateStatus
    type_filter: Optional[EventKind] = None
    sort_by: EventSort = EventSort.START_DATE

# Deletion
class ClearBookingsResult(CamelModel):
    event_id: str
    event_name: str
    event_kind: EventKind
    deleted_count: int
    forced: bool = False

def parse_payment_status(value: Optional[str]) -> Optional[PaymentStatus]:
    """``None``/``all`` means no filter; anything else must be a known status"""
    if value is None or value == "all":
        return None
    try:
        return PaymentStatus(value)
    except ValueError:
        raise InvalidStatusFilter(
            f"Invalid status filter '{value}'. Use one of: all, "
            + ", ".join(s.value for s in PaymentStatus)
        )

def parse_date_status(value: Optional[str]) -> DateStatus:
    if value is None:
        return DateStatus.ALL
    try:
        return DateStatus(value)
    except ValueError:
        raise InvalidStatusFilter(
            f"Invalid status filter '{value}'. Use one of: "
            + ", ".join(s.value for s in DateStatus)
        )
