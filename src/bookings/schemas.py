from pydantic import BaseModel, ConfigDict, Field, AliasChoices
from pydantic.alias_generators import to_camel
from typing import Generic, List, Optional, TypeVar, Union
from datetime import datetime
from decimal import Decimal
from enum import Enum

from src.events.schemas import EventKind

T = TypeVar("T")

class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

class PaymentMode(str, Enum):
    """How the booking was paid for"""
    ONLINE = "online"
    OFFLINE = "offline"

class NotificationStatus(str, Enum):
    """Outcome of the confirmation emails for a booking"""
    SENT = "sent"
    FAILED = "failed"
    NOT_ATTEMPTED = "not_attempted"

class CamelModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class ApiResponse(CamelModel, Generic[T]):
    """Success envelope shared by every endpoint"""
    success: bool = True
    message: str
    data: Optional[T] = None

# Booking Request Models
class BookingCreateRequest(CamelModel):
    """Reservation request for a trek or a tour.

    Fields are optional at the schema level; ``ReservationValidator`` checks
    them in a fixed order so each failure maps to one error kind.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[Union[str, int]] = None
    city: Optional[str] = None
    members_count: Optional[Union[int, float, str]] = None
    trek_id: Optional[str] = None
    tour_id: Optional[str] = None

class PaymentVerificationRequest(CamelModel):
    """Post-payment confirmation sent back by the checkout widget"""
    gateway_order_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("gatewayOrderId", "razorpayOrderId", "gateway_order_id")
    )
    gateway_payment_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("gatewayPaymentId", "razorpayPaymentId", "gateway_payment_id")
    )
    gateway_signature: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("gatewaySignature", "razorpaySignature", "gateway_signature")
    )
    booking_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("bookingId", "booking_id")
    )

# Booking Response Models
class GatewayOrder(CamelModel):
    """Order as created on the payment gateway"""
    id: str
    amount: int
    currency: str
    receipt: Optional[str] = None
    status: Optional[str] = None
    key_id: Optional[str] = None

class BookingCreated(CamelModel):
    """Payment instructions returned after a booking is created"""
    order: GatewayOrder
    booking_id: str
    final_price: Decimal
    event_name: str
    event_kind: EventKind
    available_cities: List[str]

class PaymentVerified(CamelModel):
    """Result of reconciling a gateway confirmation"""
    booking_id: str
    payment_id: str
    amount: Decimal
    event_name: str
    event_kind: EventKind
    already_processed: bool = False

class BookingRecord(CamelModel):
    """Booking row as shown to administrators"""
    id: str
    name: str
    email: str
    phone: str
    city: str
    members: int
    amount: Decimal
    status: PaymentStatus
    payment_mode: PaymentMode
    event_kind: EventKind
    event_id: str
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    booked_on: Optional[datetime] = None

    @classmethod
    def from_model(cls, booking) -> "BookingRecord":
        return cls(
            id=booking.id,
            name=booking.name,
            email=booking.email,
            phone=booking.phone_number,
            city=booking.city,
            members=booking.members_count,
            amount=Decimal(str(booking.final_price)),
            status=booking.payment_status,
            payment_mode=booking.payment_mode,
            event_kind=booking.event_kind,
            event_id=booking.event_id,
            gateway_order_id=booking.gateway_order_id,
            gateway_payment_id=booking.gateway_payment_id,
            booked_on=booking.created_at
        )

# Aggregates
class EventBookingStats(CamelModel):
    """Booking totals for one event"""
    total_bookings: int = 0
    paid_bookings: int = 0
    total_members: int = 0
    total_revenue: Decimal = Decimal("0.00")

class BookingNotification(BaseModel):
    """Message published once a booking is confirmed as paid"""
    booking_id: str
    customer_name: str
    customer_email: str
    phone_number: str
    city: str
    members_count: int
    amount: Decimal
    payment_mode: PaymentMode
    gateway_order_id: Optional[str] = None
    gateway_payment_id: Optional[str] = None
    event_kind: EventKind
    event_name: str
    start_date: datetime
    end_date: datetime

    @classmethod
    def from_booking(cls, booking, event) -> "BookingNotification":
        """Build the message from a booking row and its event snapshot"""
        return cls(
            booking_id=booking.id,
            customer_name=booking.name,
            customer_email=booking.email,
            phone_number=booking.phone_number,
            city=booking.city,
            members_count=booking.members_count,
            amount=Decimal(str(booking.final_price)),
            payment_mode=booking.payment_mode,
            gateway_order_id=booking.gateway_order_id,
            gateway_payment_id=booking.gateway_payment_id,
            event_kind=event.kind,
            event_name=event.name,
            start_date=event.start_date,
            end_date=event.end_date
        )
