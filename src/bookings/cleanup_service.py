import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from sqlalchemy.orm import Session

from src.clock import Clock, system_clock
from src.bookings.ledger import BookingLedger
from src.bookings.schemas import CamelModel
from src.events.service import EventCatalogService
from src.events.schemas import EventKind, EventRef
from src.exceptions import EventNotFound, EventStillActive, EventNotCompleted, PaidBookingsExist

logger = logging.getLogger(__name__)

class EventCleanupResult(CamelModel):
    """Bookings removed for one event"""
    event_kind: EventKind
    event_id: str
    event_name: str
    deleted_count: int

class EventCleanupFailure(CamelModel):
    event_kind: EventKind
    event_id: str
    event_name: str
    error: str

class CleanupReport(CamelModel):
    """Outcome of one sweep over ended events"""
    ran_at: datetime
    events_checked: int = 0
    total_deleted: int = 0
    results: List[EventCleanupResult] = []
    failures: List[EventCleanupFailure] = []

class BookingCleanupService:
    """Deletes bookings that belong to concluded events"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or system_clock
        self.ledger = BookingLedger(db)
        self.catalog = EventCatalogService(db)

    def purge_ended_events(self) -> CleanupReport:
        """Delete bookings of every trek and tour whose end date has passed.

        Each event is committed on its own; a failure is logged, rolled back
        and the sweep moves on to the next event.
        """

        now = self.clock.now()
        report = CleanupReport(ran_at=now)

        events = self.catalog.list_ended_events(now)
        report.events_checked = len(events)

        for event in events:
            try:
                deleted = self.ledger.delete_for_event(event.ref)
                self.db.commit()
            except Exception as e:
                self.db.rollback()
                logger.exception(f"Booking cleanup failed for {event.kind.value} '{event.name}' ({event.ref.id})")
                report.failures.append(EventCleanupFailure(
                    event_kind=event.kind,
                    event_id=event.ref.id,
                    event_name=event.name,
                    error=str(e)
                ))
                continue

            if deleted > 0:
                logger.info(f"Deleted {deleted} bookings for {event.kind.value}: {event.name}")
                report.results.append(EventCleanupResult(
                    event_kind=event.kind,
                    event_id=event.ref.id,
                    event_name=event.name,
                    deleted_count=deleted
                ))
                report.total_deleted += deleted

        return report

    def clear_event_bookings(self, ref: EventRef, force: bool = False) -> EventCleanupResult:
        """Admin deletion of one event's bookings.

        The event must be inactive and ended, and must have no paid bookings
        unless ``force`` is set.
        """

        event = self.catalog.get_event(ref)
        if not event:
            raise EventNotFound(ref.kind.value)

        if event.is_active:
            raise EventStillActive(ref.kind.value)

        if not event.has_ended(self.clock.now()):
            raise EventNotCompleted(ref.kind.value)

        paid_count = self.ledger.count_paid(ref)
        if paid_count > 0 and not force:
            raise PaidBookingsExist(ref.kind.value, paid_count)

        deleted = self.ledger.delete_for_event(ref)
        self.db.commit()

        logger.info(
            f"Admin cleared {deleted} bookings for {ref.kind.value} '{event.name}' ({ref.id})"
            + (f", including {paid_count} paid (forced)" if paid_count else "")
        )

        return EventCleanupResult(
            event_kind=ref.kind,
            event_id=ref.id,
            event_name=event.name,
            deleted_count=deleted
        )

class CleanupScheduler:
    """Runs the booking cleanup once a day at a fixed local time"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Clock] = None,
        hour: int = 2,
        minute: int = 0,
        retry_delay: float = 60
    ):
        self.session_factory = session_factory
        self.clock = clock or system_clock
        self.hour = hour
        self.minute = minute
        self.retry_delay = retry_delay
        self._task: Optional[asyncio.Task] = None
        self._running = False

    def next_run_after(self, moment: datetime) -> datetime:
        next_run = moment.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        if next_run <= moment:
            next_run += timedelta(days=1)
        return next_run

    def seconds_until(self, target: datetime) -> float:
        return max((target - self.clock.now()).total_seconds(), 0.0)

    def seconds_until_next_run(self) -> float:
        return self.seconds_until(self.next_run_after(self.clock.now()))

    def run_once(self) -> CleanupReport:
        """One sweep with its own session"""
        logger.info("Booking cleanup job started...")
        db = self.session_factory()
        try:
            report = BookingCleanupService(db, self.clock).purge_ended_events()
        finally:
            db.close()

        if report.failures:
            logger.warning(
                f"Booking cleanup job finished with {len(report.failures)} failures; "
                f"{report.total_deleted} bookings deleted"
            )
        else:
            logger.info(f"Booking cleanup job finished successfully; {report.total_deleted} bookings deleted")
        return report

    async def _loop(self):
        next_run = self.next_run_after(self.clock.now())
        while self._running:
            await asyncio.sleep(self.seconds_until(next_run))
            try:
                await asyncio.to_thread(self.run_once)
            except Exception:
                logger.exception("Booking cleanup job failed")
                await asyncio.sleep(self.retry_delay)
            # From the slot just served, so waking early cannot run it twice
            next_run = self.next_run_after(max(self.clock.now(), next_run))

    def start(self):
        if self._task is None:
            self._running = True
            self._task = asyncio.create_task(self._loop())
            logger.info(f"Booking cleanup scheduled daily at {self.hour:02d}:{self.minute:02d}")

    async def stop(self):
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
