"""
Booking Module

Reservation and payment state for treks and tours. It includes:

- Pricing of a reservation from per-city tiers (pricing.py)
- Request validation shared by online and offline bookings (validation.py)
- Booking persistence and per-event aggregates (ledger.py)
- Online booking creation with a gateway order (booking_service.py)
- Retirement of bookings for concluded events (cleanup_service.py)
- FastAPI endpoints for booking and payment verification (router.py)

Booking lifecycle:
- Online bookings start ``pending`` and become ``paid`` only through
  payment verification; offline bookings are created ``paid``
- A ``paid`` booking never changes status again
- Bookings are removed only together with the rest of their event's bookings

Services and the router are imported from their modules directly; this
package only re-exports the shared schemas.
"""

from .schemas import (
    PaymentStatus, PaymentMode, NotificationStatus, ApiResponse,
    BookingCreateRequest, PaymentVerificationRequest, GatewayOrder,
    BookingCreated, PaymentVerified, BookingRecord, EventBookingStats,
    BookingNotification
)

__all__ = [
    "PaymentStatus",
    "PaymentMode",
    "NotificationStatus",
    "ApiResponse",
    "BookingCreateRequest",
    "PaymentVerificationRequest",
    "GatewayOrder",
    "BookingCreated",
    "PaymentVerified",
    "BookingRecord",
    "EventBookingStats",
    "BookingNotification"
]
