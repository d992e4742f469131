from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from src.clock import Clock, get_clock
from src.database import get_db
from src.config import settings
from src.bookings.schemas import ApiResponse, BookingCreateRequest
from src.bookings.cleanup_service import BookingCleanupService, CleanupReport
from src.events.schemas import EventKind, EventRef, EventSort
from src.notifications.service import BookingNotificationService, get_notification_service
from .dependencies import AdminContext, require_admin
from .offline_service import OfflineBookingService
from .stats_service import BookingStatsService
from .schemas import (
    OfflineBookingResult, EventBookingsDetail, EventsOverview, ClearBookingsResult
)

router = APIRouter(prefix=f"{settings.API_V1_STR}/admin", tags=["admin"])

# Offline Bookings
@router.post("/offline-booking", response_model=ApiResponse[OfflineBookingResult], response_model_by_alias=True)
def create_offline_booking(
    request: BookingCreateRequest,
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
    notifier: BookingNotificationService = Depends(get_notification_service),
    clock: Clock = Depends(get_clock)
):
    """Record a booking paid in cash"""
    offline_service = OfflineBookingService(db, notifier, clock)
    result = offline_service.record_offline_booking(request)
    return ApiResponse[OfflineBookingResult](message="Offline booking recorded", data=result)

# Booking Reports
@router.get("/trek-users/{trek_id}", response_model=ApiResponse[EventBookingsDetail], response_model_by_alias=True)
def get_trek_bookings(
    trek_id: str,
    status: Optional[str] = Query(None, description="Payment status: all, pending, paid, failed"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Bookings of one trek"""
    detail = BookingStatsService(db).event_bookings(EventRef.trek(trek_id), status, page, limit)
    return ApiResponse[EventBookingsDetail](message="Trek bookings fetched", data=detail)

@router.get("/tour-users/{tour_id}", response_model=ApiResponse[EventBookingsDetail], response_model_by_alias=True)
def get_tour_bookings(
    tour_id: str,
    status: Optional[str] = Query(None, description="Payment status: all, pending, paid, failed"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Bookings of one tour"""
    detail = BookingStatsService(db).event_bookings(EventRef.tour(tour_id), status, page, limit)
    return ApiResponse[EventBookingsDetail](message="Tour bookings fetched", data=detail)

@router.get("/events-overview", response_model=ApiResponse[EventsOverview], response_model_by_alias=True)
def get_events_overview(
    status: Optional[str] = Query(None, description="Date status: upcoming, active, completed, all"),
    type: Optional[EventKind] = Query(None, description="Restrict to treks or tours"),
    sort: EventSort = Query(EventSort.START_DATE, description="startDate, -startDate, name or -name"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Treks and tours with their booking totals"""
    overview = BookingStatsService(db, clock).events_overview(status, type, page, limit, sort)
    return ApiResponse[EventsOverview](message="Events overview fetched", data=overview)

# Booking Cleanup
def _clear_bookings(ref: EventRef, force: bool, db: Session, clock: Clock) -> ApiResponse[ClearBookingsResult]:
    cleared = BookingCleanupService(db, clock).clear_event_bookings(ref, force=force)
    result = ClearBookingsResult(
        event_id=cleared.event_id,
        event_name=cleared.event_name,
        event_kind=cleared.event_kind,
        deleted_count=cleared.deleted_count,
        forced=force
    )
    return ApiResponse[ClearBookingsResult](
        message=f"Deleted {cleared.deleted_count} bookings for {ref.kind.value} {cleared.event_name}",
        data=result
    )

@router.delete("/clear-bookings/{trek_id}", response_model=ApiResponse[ClearBookingsResult], response_model_by_alias=True)
def clear_trek_bookings(
    trek_id: str,
    force: bool = Query(False, description="Delete even when paid bookings exist"),
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Delete all bookings of a completed, inactive trek"""
    return _clear_bookings(EventRef.trek(trek_id), force, db, clock)

@router.delete("/clear-tour-bookings/{tour_id}", response_model=ApiResponse[ClearBookingsResult], response_model_by_alias=True)
def clear_tour_bookings(
    tour_id: str,
    force: bool = Query(False, description="Delete even when paid bookings exist"),
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Delete all bookings of a completed, inactive tour"""
    return _clear_bookings(EventRef.tour(tour_id), force, db, clock)

@router.post("/cleanup/run", response_model=ApiResponse[CleanupReport], response_model_by_alias=True)
def run_cleanup(
    admin: AdminContext = Depends(require_admin),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock)
):
    """Run the ended-event booking sweep now"""
    report = BookingCleanupService(db, clock).purge_ended_events()
    return ApiResponse[CleanupReport](
        message=f"Cleanup finished: {report.total_deleted} bookings deleted",
        data=report
    )
