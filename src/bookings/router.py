from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from src.clock import Clock, get_clock
from src.database import get_db
from src.bookings.schemas import (
    ApiResponse, BookingCreateRequest, BookingCreated,
    PaymentVerificationRequest, PaymentVerified
)
from src.bookings.booking_service import BookingService
from src.payments.gateway import PaymentGateway, get_payment_gateway
from src.payments.reconciliation_service import PaymentReconciliationService
from src.notifications.service import BookingNotificationService, get_notification_service

router = APIRouter()

@router.post(
    "/book",
    response_model=ApiResponse[BookingCreated],
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED
)
def create_booking(
    request: BookingCreateRequest,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    clock: Clock = Depends(get_clock)
):
    """Create a pending booking for a trek or tour and open its payment order"""

    booking_service = BookingService(db, gateway, clock)
    created = booking_service.create_booking(request)

    return ApiResponse[BookingCreated](
        message="Booking created, proceed to payment",
        data=created
    )

@router.post(
    "/verify-payment",
    response_model=ApiResponse[PaymentVerified],
    response_model_by_alias=True
)
def verify_payment(
    request: PaymentVerificationRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: BookingNotificationService = Depends(get_notification_service)
):
    """Verify the checkout signature and mark the booking as paid"""

    reconciliation_service = PaymentReconciliationService(db, gateway)
    result, notification = reconciliation_service.verify_payment(request)

    if notification:
        # Runs after the response is sent; failures are logged by the notifier
        background_tasks.add_task(notifier.notify_booking_confirmed, notification)

    message = "Payment already verified" if result.already_processed else "Payment verified successfully"
    return ApiResponse[PaymentVerified](message=message, data=result)
