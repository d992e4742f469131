from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Session

from src.models import Trek, Tour
from src.events.schemas import EventKind, EventRef, EventSnapshot, EventSort, CityPrice

_MODELS = {
    EventKind.TREK: Trek,
    EventKind.TOUR: Tour,
}

class EventCatalogService:
    """Read-only access to treks and tours for the booking core"""

    def __init__(self, db: Session):
        self.db = db

    def get_event(self, ref: EventRef) -> Optional[EventSnapshot]:
        """Get a trek or tour by reference"""
        model = _MODELS[ref.kind]
        row = self.db.query(model).filter(model.id == ref.id).first()
        if not row:
            return None
        return self._to_snapshot(ref.kind, row)

    def list_events(
        self,
        kind: Optional[EventKind] = None,
        date_status: str = "all",
        now: Optional[datetime] = None,
        sort: EventSort = EventSort.START_DATE
    ) -> List[EventSnapshot]:
        """List events of one or both kinds, by start date ascending unless ``sort`` says otherwise"""

        now = now or datetime.now()
        kinds = [kind] if kind else [EventKind.TREK, EventKind.TOUR]

        events = []
        for event_kind in kinds:
            model = _MODELS[event_kind]
            query = self.db.query(model)

            if date_status == "upcoming":
                query = query.filter(model.start_date > now)
            elif date_status == "completed":
                query = query.filter(model.end_date < now)
            elif date_status == "active":
                query = query.filter(model.start_date <= now, model.end_date >= now)

            events.extend(self._to_snapshot(event_kind, row) for row in query.all())

        if sort in (EventSort.NAME, EventSort.NAME_DESC):
            key = lambda e: (e.name.lower(), e.start_date)
        else:
            key = lambda e: (e.start_date, e.name)
        return sorted(events, key=key, reverse=sort.descending)

    def list_ended_events(self, now: datetime) -> List[EventSnapshot]:
        """Events of both kinds whose end date is in the past"""
        return self.list_events(date_status="completed", now=now)

    def _to_snapshot(self, kind: EventKind, row) -> EventSnapshot:
        return EventSnapshot(
            ref=EventRef(kind=kind, id=row.id),
            name=row.name,
            is_active=bool(row.is_active),
            start_date=row.start_date,
            end_date=row.end_date,
            city_pricing=[
                CityPrice(
                    city=cp.city,
                    price=Decimal(cp.price) if cp.price is not None else None,
                    discount_price=Decimal(cp.discount_price or 0)
                )
                for cp in row.city_pricing
            ]
        )
