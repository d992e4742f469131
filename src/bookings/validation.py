import re
from typing import Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session

from src.clock import Clock, system_clock
from src.events.service import EventCatalogService
from src.events.schemas import EventRef, EventSnapshot
from src.bookings.schemas import BookingCreateRequest
from src.bookings.pricing import PriceQuote, resolve_price
from src.exceptions import (
    MissingField, AmbiguousEventReference, InvalidPhone, InvalidMemberCount,
    EventNotFound, EventInactive
)

PHONE_PATTERN = re.compile(r"^[0-9]{10}$")
MIN_MEMBERS = 1
MAX_MEMBERS = 20

REQUIRED_FIELDS = (
    ("name", "name"),
    ("email", "email"),
    ("phone_number", "phoneNumber"),
    ("city", "city"),
    ("members_count", "membersCount"),
)

class ValidatedReservation(BaseModel):
    """A reservation request that passed every check, with its price"""
    request: BookingCreateRequest
    ref: EventRef
    phone: str
    event: EventSnapshot
    quote: PriceQuote

class ReservationValidator:
    """Checks a reservation request in a fixed order, failing on the first problem.

    Order: required fields, event reference, phone, member count, event
    existence, event availability, city pricing.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.catalog = EventCatalogService(db)
        self.clock = clock or system_clock

    def validate(self, request: BookingCreateRequest) -> ValidatedReservation:
        missing = [
            wire_name for attr, wire_name in REQUIRED_FIELDS
            if self._is_blank(getattr(request, attr))
        ]
        if missing:
            raise MissingField(missing)

        ref = self.event_ref(request)

        # JSON numbers are accepted; the digits are checked on their text form
        phone = str(request.phone_number).strip()
        if isinstance(request.phone_number, bool) or not PHONE_PATTERN.match(phone):
            raise InvalidPhone()

        members_count = self.members_count(request.members_count)

        event = self.catalog.get_event(ref)
        if not event:
            raise EventNotFound(ref.kind.value)

        if not event.is_active:
            raise EventInactive(ref.kind.value, event.available_cities)

        # Re-checked here so a booking cannot slip in for an event the
        # cleanup job is about to retire
        if event.has_ended(self.clock.now()):
            raise EventInactive(
                ref.kind.value,
                event.available_cities,
                message=f"This {ref.kind.value} has already ended and can no longer be booked"
            )

        quote = resolve_price(event, request.city, members_count)

        return ValidatedReservation(request=request, ref=ref, phone=phone, event=event, quote=quote)

    @staticmethod
    def event_ref(request: BookingCreateRequest) -> EventRef:
        """Exactly one of trekId / tourId must be present"""
        trek_id = (request.trek_id or "").strip()
        tour_id = (request.tour_id or "").strip()

        if bool(trek_id) == bool(tour_id):
            raise AmbiguousEventReference()

        return EventRef.trek(trek_id) if trek_id else EventRef.tour(tour_id)

    @staticmethod
    def members_count(value) -> int:
        """Whole number of members in range; numeric strings are accepted"""
        if isinstance(value, bool):
            raise InvalidMemberCount()
        if isinstance(value, str):
            if not value.strip().isdigit():
                raise InvalidMemberCount()
            value = int(value.strip())
        elif isinstance(value, float):
            if not value.is_integer():
                raise InvalidMemberCount()
            value = int(value)

        if not MIN_MEMBERS <= value <= MAX_MEMBERS:
            raise InvalidMemberCount()
        return value

    @staticmethod
    def _is_blank(value) -> bool:
        if value is None:
            return True
        if isinstance(value, str):
            return not value.strip()
        return False
