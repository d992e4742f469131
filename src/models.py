import uuid
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Numeric,
    CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from src.database import Base

def _uuid() -> str:
    return str(uuid.uuid4())

# ================================
# Treks
# ================================
class Trek(Base):
    __tablename__ = "treks"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    location = Column(String(255))
    duration = Column(String(100))
    difficulty = Column(String(20), default="Moderate")
    description = Column(Text)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    city_pricing = relationship(
        "TrekCityPrice", back_populates="trek",
        cascade="all, delete-orphan", lazy="selectin", order_by="TrekCityPrice.id"
    )

class TrekCityPrice(Base):
    __tablename__ = "trek_city_pricing"
    __table_args__ = (
        UniqueConstraint("trek_id", "city", name="uq_trek_city"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    trek_id = Column(String(36), ForeignKey("treks.id", ondelete="CASCADE"), nullable=False, index=True)
    city = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=True)
    discount_price = Column(Numeric(10, 2), default=0, nullable=False)

    # Relationships
    trek = relationship("Trek", back_populates="city_pricing")

# ================================
# Tours
# ================================
class Tour(Base):
    __tablename__ = "tours"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    location = Column(String(255))
    duration = Column(String(100))
    difficulty = Column(String(20), default="Moderate")
    tour_type = Column(String(50), default="Adventure")
    description = Column(Text)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False, index=True)
    max_group_size = Column(Integer, default=20)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    is_featured = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    # Relationships
    city_pricing = relationship(
        "TourCityPrice", back_populates="tour",
        cascade="all, delete-orphan", lazy="selectin", order_by="TourCityPrice.id"
    )

class TourCityPrice(Base):
    __tablename__ = "tour_city_pricing"
    __table_args__ = (
        UniqueConstraint("tour_id", "city", name="uq_tour_city"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    tour_id = Column(String(36), ForeignKey("tours.id", ondelete="CASCADE"), nullable=False, index=True)
    city = Column(String(50), nullable=False)
    price = Column(Numeric(10, 2), nullable=True)
    discount_price = Column(Numeric(10, 2), default=0, nullable=False)

    # Relationships
    tour = relationship("Tour", back_populates="city_pricing")

# ================================
# Bookings
# ================================
class UserBooking(Base):
    __tablename__ = "user_bookings"
    __table_args__ = (
        CheckConstraint("event_kind IN ('trek', 'tour')", name="ck_booking_event_kind"),
        CheckConstraint("payment_status IN ('pending', 'paid', 'failed')", name="ck_booking_payment_status"),
        CheckConstraint("members_count >= 1 AND members_count <= 20", name="ck_booking_members_count"),
        Index("ix_booking_event", "event_kind", "event_id"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone_number = Column(String(20), nullable=False)
    city = Column(String(50), nullable=False)
    members_count = Column(Integer, nullable=False)

    # Exactly one event: (event_kind, event_id) is the stored form of EventRef
    event_kind = Column(String(10), nullable=False)
    event_id = Column(String(36), nullable=False)

    final_price = Column(Numeric(12, 2), nullable=False)
    payment_status = Column(String(20), default="pending", nullable=False, index=True)
    payment_mode = Column(String(20), default="online", nullable=False)
    gateway_order_id = Column(String(100), index=True)
    gateway_payment_id = Column(String(100))
    gateway_signature = Column(String(255))
    created_at = Column(DateTime, default=datetime.now, index=True)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    @property
    def event_ref(self):
        from src.events.schemas import EventRef
        return EventRef(kind=self.event_kind, id=self.event_id)
