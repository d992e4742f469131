import math
from typing import Optional
from sqlalchemy.orm import Session

from src.clock import Clock, system_clock
from src.bookings.ledger import BookingLedger
from src.bookings.schemas import BookingRecord
from src.events.service import EventCatalogService
from src.events.schemas import EventKind, EventRef, EventSort
from src.exceptions import EventNotFound
from src.admin.schemas import (
    EventHeader, EventBookingsSummary, EventBookingsMeta, EventBookingsDetail,
    EventOverviewRow, OverviewPagination, EventsOverview, DateStatus,
    parse_payment_status, parse_date_status
)

def _total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0

class BookingStatsService:
    """Read-only booking reports for the admin dashboard"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.ledger = BookingLedger(db)
        self.catalog = EventCatalogService(db)
        self.clock = clock or system_clock

    def event_bookings(
        self,
        ref: EventRef,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> EventBookingsDetail:
        """Bookings of one event, newest first, with totals over the filtered set"""

        payment_status = parse_payment_status(status)

        event = self.catalog.get_event(ref)
        if not event:
            raise EventNotFound(ref.kind.value)

        total = self.ledger.count_for_event(ref, payment_status)
        bookings = self.ledger.list_for_event(
            ref, payment_status, offset=(page - 1) * limit, limit=limit
        )
        total_members, total_revenue = self.ledger.summary_for_event(ref, payment_status)

        return EventBookingsDetail(
            event=EventHeader(
                id=ref.id,
                name=event.name,
                kind=ref.kind,
                start_date=event.start_date,
                end_date=event.end_date,
                is_active=event.is_active
            ),
            bookings=[BookingRecord.from_model(b) for b in bookings],
            summary=EventBookingsSummary(
                total_members=total_members,
                total_revenue=total_revenue
            ),
            meta=EventBookingsMeta(
                total_bookings=total,
                current_page=page,
                total_pages=_total_pages(total, limit),
                bookings_count=len(bookings),
                status_filter=payment_status.value if payment_status else "all"
            )
        )

    def events_overview(
        self,
        status: Optional[str] = None,
        event_type: Optional[EventKind] = None,
        page: int = 1,
        limit: int = 10,
        sort: EventSort = EventSort.START_DATE
    ) -> EventsOverview:
        """Treks and tours together, ordered by ``sort``, with per-event booking totals"""

        date_status = parse_date_status(status)
        now = self.clock.now()

        events = self.catalog.list_events(kind=event_type, date_status=date_status.value, now=now, sort=sort)
        total = len(events)

        page_events = events[(page - 1) * limit:page * limit]
        stats = self.ledger.stats_by_event([e.ref for e in page_events])

        rows = [
            EventOverviewRow(
                id=event.ref.id,
                name=event.name,
                kind=event.kind,
                start_date=event.start_date,
                end_date=event.end_date,
                is_active=event.is_active,
                status=DateStatus(event.date_status(now)),
                **stats[event.ref].model_dump()
            )
            for event in page_events
        ]

        return EventsOverview(
            events=rows,
            pagination=OverviewPagination(
                current_page=page,
                total_pages=_total_pages(total, limit),
                total_events=total,
                limit=limit
            ),
            status_filter=date_status,
            type_filter=event_type,
            sort_by=sort
        )
