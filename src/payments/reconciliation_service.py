import logging
from decimal import Decimal
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from src.bookings.schemas import (
    PaymentVerificationRequest, PaymentVerified, BookingNotification
)
from src.bookings.ledger import BookingLedger
from src.events.service import EventCatalogService
from src.payments.gateway import PaymentGateway
from src.exceptions import (
    MissingVerificationData, SignatureMismatch, BookingNotFound, OrderMismatch
)

logger = logging.getLogger(__name__)

class PaymentReconciliationService:
    """Verifies checkout confirmations and moves bookings to paid"""

    def __init__(self, db: Session, gateway: PaymentGateway):
        self.db = db
        self.gateway = gateway
        self.ledger = BookingLedger(db)
        self.catalog = EventCatalogService(db)

    def verify_payment(
        self,
        request: PaymentVerificationRequest
    ) -> Tuple[PaymentVerified, Optional[BookingNotification]]:
        """Reconcile one confirmation.

        Returns the verification result and, when this call performed the
        transition to paid, the notification message to publish. A repeated
        confirmation for an already-paid booking returns no message.
        """

        order_id = request.gateway_order_id
        payment_id = request.gateway_payment_id
        signature = request.gateway_signature
        booking_id = request.booking_id

        if not all([order_id, payment_id, signature, booking_id]):
            raise MissingVerificationData()

        if not self.gateway.verify_signature(order_id, payment_id, signature):
            logger.warning(f"Signature mismatch for booking {booking_id} (order {order_id}, payment {payment_id})")
            raise SignatureMismatch()

        updated = self.ledger.mark_paid(booking_id, order_id, payment_id, signature)
        self.db.commit()

        booking = self.ledger.get(booking_id)
        if not booking:
            raise BookingNotFound()

        if not updated:
            if booking.gateway_order_id != order_id:
                logger.warning(f"Order {order_id} does not belong to booking {booking_id}")
                raise OrderMismatch()

            # Already paid: duplicate callback or client retry
            logger.info(f"Booking {booking_id} already paid; verification is a no-op")

        event = self.catalog.get_event(booking.event_ref)
        event_name = event.name if event else ""

        result = PaymentVerified(
            booking_id=booking.id,
            payment_id=booking.gateway_payment_id or payment_id,
            amount=Decimal(str(booking.final_price)),
            event_name=event_name,
            event_kind=booking.event_kind,
            already_processed=not updated
        )

        if not updated:
            return result, None

        logger.info(f"Booking {booking_id} marked paid with payment {payment_id}")

        if not event:
            logger.error(f"Booking {booking_id} references missing {booking.event_kind} {booking.event_id}; no emails")
            return result, None

        return result, BookingNotification.from_booking(booking, event)
