from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

class EventKind(str, Enum):
    """Kind of excursion a booking can reference"""
    TREK = "trek"
    TOUR = "tour"

class EventRef(BaseModel):
    """Reference to exactly one event: a trek or a tour"""
    model_config = ConfigDict(frozen=True)

    kind: EventKind
    id: str

    @classmethod
    def trek(cls, event_id: str) -> "EventRef":
        return cls(kind=EventKind.TREK, id=event_id)

    @classmethod
    def tour(cls, event_id: str) -> "EventRef":
        return cls(kind=EventKind.TOUR, id=event_id)

class CityPrice(BaseModel):
    """Per-departure-city pricing tier"""
    city: str
    price: Optional[Decimal] = None
    discount_price: Decimal = Decimal("0")

    @property
    def effective_price(self) -> Optional[Decimal]:
        if self.discount_price is not None and self.discount_price > 0:
            return self.discount_price
        return self.price

class EventSnapshot(BaseModel):
    """Read-only view of a catalog event as the booking core needs it"""
    ref: EventRef
    name: str
    is_active: bool
    start_date: datetime
    end_date: datetime
    city_pricing: List[CityPrice] = []

    @property
    def kind(self) -> EventKind:
        return self.ref.kind

    @property
    def available_cities(self) -> List[str]:
        return [cp.city for cp in self.city_pricing]

    def has_ended(self, now: datetime) -> bool:
        return self.end_date < now

    def date_status(self, now: datetime) -> str:
        if now > self.end_date:
            return "completed"
        if now < self.start_date:
            return "upcoming"
        return "active"

class EventSort(str, Enum):
    """Orderings offered by event listings; a leading ``-`` means descending"""
    START_DATE = "startDate"
    START_DATE_DESC = "-startDate"
    NAME = "name"
    NAME_DESC = "-name"

    @property
    def descending(self) -> bool:
        return self.value.startswith("-")
