from typing import Dict, List, Optional, Tuple
from decimal import Decimal
from sqlalchemy import func, case
from sqlalchemy.orm import Session

from src.models import UserBooking
from src.events.schemas import EventRef
from src.bookings.schemas import PaymentStatus, EventBookingStats

def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))

class BookingLedger:
    """Persistence for booking records.

    Every write is scoped either to one booking id or to one event reference.
    Commits are left to the calling service so that a service can group a
    booking insert with its gateway order id in one transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def add(self, booking: UserBooking) -> UserBooking:
        self.db.add(booking)
        self.db.flush()
        return booking

    def get(self, booking_id: str) -> Optional[UserBooking]:
        return self.db.query(UserBooking).filter(UserBooking.id == booking_id).first()

    def mark_paid(self, booking_id: str, order_id: str, payment_id: str, signature: str) -> int:
        """Single conditional UPDATE moving a booking to paid.

        Returns the number of rows changed: 0 when the booking is missing,
        already paid, or belongs to a different gateway order.
        """
        return (
            self.db.query(UserBooking)
            .filter(
                UserBooking.id == booking_id,
                UserBooking.gateway_order_id == order_id,
                UserBooking.payment_status != PaymentStatus.PAID.value
            )
            .update(
                {
                    UserBooking.payment_status: PaymentStatus.PAID.value,
                    UserBooking.gateway_payment_id: payment_id,
                    UserBooking.gateway_signature: signature,
                },
                synchronize_session=False
            )
        )

    def _event_query(self, ref: EventRef, status: Optional[PaymentStatus] = None):
        query = self.db.query(UserBooking).filter(
            UserBooking.event_kind == ref.kind.value,
            UserBooking.event_id == ref.id
        )
        if status:
            query = query.filter(UserBooking.payment_status == status.value)
        return query

    def list_for_event(
        self,
        ref: EventRef,
        status: Optional[PaymentStatus] = None,
        offset: int = 0,
        limit: Optional[int] = None
    ) -> List[UserBooking]:
        """Bookings of one event, newest first"""
        query = self._event_query(ref, status).order_by(UserBooking.created_at.desc(), UserBooking.id)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_for_event(self, ref: EventRef, status: Optional[PaymentStatus] = None) -> int:
        return self._event_query(ref, status).count()

    def count_paid(self, ref: EventRef) -> int:
        return self.count_for_event(ref, PaymentStatus.PAID)

    def summary_for_event(
        self,
        ref: EventRef,
        status: Optional[PaymentStatus] = None
    ) -> Tuple[int, Decimal]:
        """(total members, paid revenue) over the status-filtered set"""
        query = self.db.query(
            func.coalesce(func.sum(UserBooking.members_count), 0),
            func.coalesce(func.sum(
                case((UserBooking.payment_status == PaymentStatus.PAID.value, UserBooking.final_price), else_=0)
            ), 0)
        ).filter(
            UserBooking.event_kind == ref.kind.value,
            UserBooking.event_id == ref.id
        )
        if status:
            query = query.filter(UserBooking.payment_status == status.value)

        total_members, total_revenue = query.one()
        return int(total_members or 0), _money(total_revenue)

    def stats_by_event(self, refs: List[EventRef]) -> Dict[EventRef, EventBookingStats]:
        """Booking counts, members and paid revenue for many events in one grouped query"""

        if not refs:
            return {}

        event_ids = {ref.id for ref in refs}
        paid = UserBooking.payment_status == PaymentStatus.PAID.value

        rows = self.db.query(
            UserBooking.event_kind,
            UserBooking.event_id,
            func.count(UserBooking.id),
            func.coalesce(func.sum(case((paid, 1), else_=0)), 0),
            func.coalesce(func.sum(UserBooking.members_count), 0),
            func.coalesce(func.sum(case((paid, UserBooking.final_price), else_=0)), 0)
        ).filter(
            UserBooking.event_id.in_(event_ids)
        ).group_by(
            UserBooking.event_kind, UserBooking.event_id
        ).all()

        found = {}
        for kind, event_id, total, paid_count, members, revenue in rows:
            found[(kind, event_id)] = EventBookingStats(
                total_bookings=int(total),
                paid_bookings=int(paid_count or 0),
                total_members=int(members or 0),
                total_revenue=_money(revenue)
            )

        return {
            ref: found.get((ref.kind.value, ref.id), EventBookingStats())
            for ref in refs
        }

    def delete_for_event(self, ref: EventRef) -> int:
        """Bulk delete every booking of one event; returns the deleted count"""
        return self._event_query(ref).delete(synchronize_session=False)
