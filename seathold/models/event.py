"""Event model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from seathold.models.base import Base, BigIntPK

if TYPE_CHECKING:
    from seathold.models.booking import Booking
    from seathold.models.seat import Seat


class Event(Base):
    """Event model representing a ticketed event."""

    __tablename__ = "events"

    event_id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    event_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    venue_name: Mapped[str | None] = mapped_column(String(255))
    # Overrides the global hold TTL when set
    hold_ttl_seconds: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )

    # Relationships
    seats: Mapped[list["Seat"]] = relationship("Seat", back_populates="event")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="event")
