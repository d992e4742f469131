import logging
import uuid
from typing import Optional
from sqlalchemy.orm import Session

from src.clock import Clock
from src.models import UserBooking
from src.bookings.schemas import (
    BookingCreateRequest, BookingRecord, BookingNotification, PaymentStatus, PaymentMode
)
from src.bookings.ledger import BookingLedger
from src.bookings.validation import ReservationValidator
from src.notifications.service import BookingNotificationService
from src.admin.schemas import OfflineBookingResult

logger = logging.getLogger(__name__)

OFFLINE_PREFIX = "offline_"

def synthetic_gateway_ids() -> dict:
    """Placeholder gateway ids for a cash booking; the prefix is never issued by the gateway"""
    token = uuid.uuid4().hex
    return {
        "gateway_order_id": f"{OFFLINE_PREFIX}order_{token}",
        "gateway_payment_id": f"{OFFLINE_PREFIX}pay_{token}",
        "gateway_signature": f"{OFFLINE_PREFIX}sig_{token}",
    }

class OfflineBookingService:
    """Records bookings paid in cash at the office"""

    def __init__(
        self,
        db: Session,
        notifier: BookingNotificationService,
        clock: Optional[Clock] = None
    ):
        self.db = db
        self.notifier = notifier
        self.ledger = BookingLedger(db)
        self.validator = ReservationValidator(db, clock)

    def record_offline_booking(self, request: BookingCreateRequest) -> OfflineBookingResult:
        """Create an already-paid booking and send the confirmation emails.

        The booking is committed before any email goes out; delivery problems
        only show up in ``notification_status``.
        """

        reservation = self.validator.validate(request)
        event = reservation.event
        quote = reservation.quote

        booking = UserBooking(
            name=request.name.strip(),
            email=request.email.strip(),
            phone_number=reservation.phone,
            city=quote.city,
            members_count=quote.members_count,
            event_kind=reservation.ref.kind.value,
            event_id=reservation.ref.id,
            final_price=quote.final_price,
            payment_status=PaymentStatus.PAID.value,
            payment_mode=PaymentMode.OFFLINE.value,
            **synthetic_gateway_ids()
        )

        self.ledger.add(booking)
        self.db.commit()
        self.db.refresh(booking)

        logger.info(
            f"Offline booking {booking.id} recorded for {event.kind.value} {event.ref.id}: "
            f"{booking.members_count} members, {quote.final_price}"
        )

        notification_status = self.notifier.notify_booking_confirmed(
            BookingNotification.from_booking(booking, event)
        )

        return OfflineBookingResult(
            booking=BookingRecord.from_model(booking),
            event_name=event.name,
            event_kind=event.kind,
            notification_status=notification_status
        )
