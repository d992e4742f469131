import logging
from typing import Optional
from sqlalchemy.orm import Session

from src.clock import Clock
from src.models import UserBooking
from src.bookings.schemas import (
    BookingCreateRequest, BookingCreated, PaymentStatus, PaymentMode
)
from src.bookings.ledger import BookingLedger
from src.bookings.validation import ReservationValidator
from src.payments.gateway import PaymentGateway, to_minor_units
from src.exceptions import BookingError

logger = logging.getLogger(__name__)

class BookingService:
    """Service for creating online bookings and their gateway orders"""

    def __init__(self, db: Session, gateway: PaymentGateway, clock: Optional[Clock] = None):
        self.db = db
        self.gateway = gateway
        self.ledger = BookingLedger(db)
        self.validator = ReservationValidator(db, clock)

    def create_booking(self, request: BookingCreateRequest) -> BookingCreated:
        """Validate, price, persist a pending booking and open a gateway order for it.

        The booking row is flushed before the gateway call and committed
        together with the order id. If the gateway call fails the row is
        rolled back, so no pending booking is left without an order.
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
            payment_status=PaymentStatus.PENDING.value,
            payment_mode=PaymentMode.ONLINE.value
        )

        try:
            self.ledger.add(booking)

            order = self.gateway.create_order(
                amount_minor=to_minor_units(quote.final_price),
                receipt=f"rcpt_{booking.id.replace('-', '')}",
                notes={
                    "itemId": event.ref.id,
                    "itemType": event.kind.value,
                    "city": quote.city,
                    "membersCount": quote.members_count,
                    "bookingFor": booking.name,
                    "bookingId": booking.id,
                }
            )

            booking.gateway_order_id = order.id
            self.db.commit()
        except BookingError:
            self.db.rollback()
            raise

        logger.info(
            f"Booking {booking.id} created for {event.kind.value} {event.ref.id}: "
            f"{booking.members_count} x {quote.unit_price} = {quote.final_price}, order {order.id}"
        )

        return BookingCreated(
            order=order,
            booking_id=booking.id,
            final_price=quote.final_price,
            event_name=event.name,
            event_kind=event.kind,
            available_cities=quote.available_cities
        )
