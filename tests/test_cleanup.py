import asyncio
from datetime import datetime, timedelta

import pytest

from src.bookings.cleanup_service import BookingCleanupService, CleanupScheduler
from src.clock import FixedClock
from src.events.schemas import EventRef
from src.exceptions import EventNotFound, EventStillActive, EventNotCompleted, PaidBookingsExist
from src.models import UserBooking
from tests.factories import NOW, make_trek, make_tour, make_booking

def _ended_trek(db, name="Kalsubai", is_active=False):
    return make_trek(db, name=name, start=NOW - timedelta(days=5), end=NOW - timedelta(days=4), is_active=is_active)

def _remaining(db, event):
    db.expire_all()
    return db.query(UserBooking).filter(UserBooking.event_id == event.id).count()

def test_purge_removes_bookings_of_ended_events_only(db, clock):
    ended_trek = _ended_trek(db, is_active=True)
    ended_tour = make_tour(db, start=NOW - timedelta(days=10), end=NOW - timedelta(days=7))
    running_trek = make_trek(db, name="Ongoing", start=NOW - timedelta(hours=2), end=NOW + timedelta(days=1))
    future_tour = make_tour(db, name="Spiti", start=NOW + timedelta(days=40))

    make_booking(db, ended_trek, status="paid")
    make_booking(db, ended_trek, status="pending")
    make_booking(db, ended_tour, kind="tour", status="paid")
    make_booking(db, running_trek, status="paid")
    make_booking(db, future_tour, kind="tour", status="pending")

    report = BookingCleanupService(db, clock).purge_ended_events()

    assert report.events_checked == 2
    assert report.total_deleted == 3
    assert report.failures == []
    assert {(r.event_kind.value, r.deleted_count) for r in report.results} == {("trek", 2), ("tour", 1)}
    assert _remaining(db, ended_trek) == 0
    assert _remaining(db, ended_tour) == 0
    assert _remaining(db, running_trek) == 1
    assert _remaining(db, future_tour) == 1

def test_purge_continues_after_a_failing_event(db, clock):
    first = _ended_trek(db, name="First")
    second = _ended_trek(db, name="Second")
    make_booking(db, first)
    make_booking(db, second)

    service = BookingCleanupService(db, clock)
    original = service.ledger.delete_for_event

    def flaky_delete(ref):
        if ref.id == first.id:
            raise RuntimeError("database is locked")
        return original(ref)

    service.ledger.delete_for_event = flaky_delete

    report = service.purge_ended_events()

    assert [f.event_name for f in report.failures] == ["First"]
    assert "database is locked" in report.failures[0].error
    assert report.total_deleted == 1
    assert _remaining(db, first) == 1
    assert _remaining(db, second) == 0

def test_clear_requires_existing_event(db, clock):
    with pytest.raises(EventNotFound):
        BookingCleanupService(db, clock).clear_event_bookings(EventRef.trek("missing"))

def test_clear_rejects_active_event(db, clock):
    trek = _ended_trek(db, is_active=True)

    with pytest.raises(EventStillActive) as exc_info:
        BookingCleanupService(db, clock).clear_event_bookings(EventRef.trek(trek.id))

    assert exc_info.value.message == "Cannot delete bookings for active treks. Deactivate trek first."

def test_clear_rejects_event_not_yet_ended(db, clock):
    tour = make_tour(db, is_active=False)

    with pytest.raises(EventNotCompleted) as exc_info:
        BookingCleanupService(db, clock).clear_event_bookings(EventRef.tour(tour.id))

    assert exc_info.value.message == "Tour is not completed yet. Cannot delete bookings."

def test_clear_rejects_paid_bookings_for_both_kinds(db, clock):
    trek = _ended_trek(db)
    tour = make_tour(db, start=NOW - timedelta(days=10), end=NOW - timedelta(days=7), is_active=False)
    make_booking(db, trek, status="paid")
    make_booking(db, tour, kind="tour", status="paid")
    make_booking(db, tour, kind="tour", status="paid")

    service = BookingCleanupService(db, clock)

    with pytest.raises(PaidBookingsExist):
        service.clear_event_bookings(EventRef.trek(trek.id))
    with pytest.raises(PaidBookingsExist) as exc_info:
        service.clear_event_bookings(EventRef.tour(tour.id))

    assert exc_info.value.status_code == 403
    assert exc_info.value.details == {"paidBookings": 2, "requiredPaidBookings": 0}
    assert _remaining(db, trek) == 1
    assert _remaining(db, tour) == 2

def test_clear_deletes_exactly_the_event_bookings(db, clock):
    trek = _ended_trek(db)
    other = _ended_trek(db, name="Other")
    make_booking(db, trek, status="pending")
    make_booking(db, trek, status="failed")
    make_booking(db, other, status="pending")

    result = BookingCleanupService(db, clock).clear_event_bookings(EventRef.trek(trek.id))

    assert result.deleted_count == 2
    assert _remaining(db, trek) == 0
    assert _remaining(db, other) == 1

def test_clear_with_force_deletes_paid_bookings(db, clock):
    trek = _ended_trek(db)
    make_booking(db, trek, status="paid")

    result = BookingCleanupService(db, clock).clear_event_bookings(EventRef.trek(trek.id), force=True)

    assert result.deleted_count == 1
    assert _remaining(db, trek) == 0

def test_clear_endpoints(client, admin_headers, db):
    trek = _ended_trek(db)
    tour = make_tour(db, start=NOW - timedelta(days=10), end=NOW - timedelta(days=7), is_active=False)
    make_booking(db, trek, status="pending")
    make_booking(db, tour, kind="tour", status="paid")

    trek_response = client.delete(f"/api/v1/admin/clear-bookings/{trek.id}", headers=admin_headers)
    assert trek_response.status_code == 200
    assert trek_response.json()["data"]["deletedCount"] == 1

    blocked = client.delete(f"/api/v1/admin/clear-tour-bookings/{tour.id}", headers=admin_headers)
    assert blocked.status_code == 403
    assert blocked.json()["message"] == "Cannot delete tour with paid bookings. Archive instead."
    assert blocked.json()["paidBookings"] == 1

    forced = client.delete(
        f"/api/v1/admin/clear-tour-bookings/{tour.id}", params={"force": "true"}, headers=admin_headers
    )
    assert forced.status_code == 200
    assert forced.json()["data"]["forced"] is True

def test_cleanup_run_endpoint(client, admin_headers, db):
    trek = _ended_trek(db)
    make_booking(db, trek, status="paid")

    response = client.post("/api/v1/admin/cleanup/run", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["totalDeleted"] == 1

@pytest.mark.parametrize("now,expected_hours", [
    (datetime(2025, 6, 1, 10, 0), 16),
    (datetime(2025, 6, 1, 1, 0), 1),
    (datetime(2025, 6, 1, 2, 0), 24),
])
def test_scheduler_sleeps_until_next_run(session_factory, now, expected_hours):
    scheduler = CleanupScheduler(session_factory, FixedClock(now), hour=2, minute=0)

    assert scheduler.seconds_until_next_run() == expected_hours * 3600

def test_scheduler_run_once_uses_its_own_session(db, session_factory, clock):
    trek = _ended_trek(db)
    make_booking(db, trek, status="paid")

    report = CleanupScheduler(session_factory, clock).run_once()

    assert report.total_deleted == 1
    assert _remaining(db, trek) == 0

async def _wait_for(condition, attempts=200):
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0.01)

def test_scheduler_loop_survives_a_failed_sweep(session_factory, clock):
    scheduler = CleanupScheduler(session_factory, clock, retry_delay=0)
    scheduler.seconds_until = lambda target: 0
    calls = []

    def flaky_run():
        calls.append(len(calls))
        if len(calls) == 1:
            raise RuntimeError("database unavailable")

    scheduler.run_once = flaky_run

    async def scenario():
        scheduler.start()
        task = scheduler._task
        await _wait_for(lambda: len(calls) >= 3)
        alive = not task.done()
        await scheduler.stop()
        return task, alive

    task, alive = asyncio.run(scenario())

    assert alive
    assert len(calls) >= 3
    assert task.cancelled()
    assert scheduler._task is None

def test_scheduler_does_not_repeat_a_slot_after_waking_early(session_factory):
    # Sleep returned a few milliseconds before 02:00
    early = FixedClock(datetime(2025, 6, 2, 1, 59, 59, 995000))
    scheduler = CleanupScheduler(session_factory, early, hour=2, minute=0)
    calls = []
    scheduler.run_once = lambda: calls.append(early.now())

    async def scenario():
        scheduler.start()
        await _wait_for(lambda: len(calls) >= 1)
        await asyncio.sleep(0.1)
        await scheduler.stop()

    asyncio.run(scenario())

    assert len(calls) == 1
