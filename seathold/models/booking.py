"""Booking models."""

import enum
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from seathold.models.base import Base, BigIntPK

if TYPE_CHECKING:
    from seathold.models.event import Event


class BookingStatus(str, enum.Enum):
    """Booking status enum."""

    CONFIRMED = "confirmed"


class Booking(Base):
    """Permanent booking created from a confirmed hold."""

    __tablename__ = "bookings"

    booking_id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    booking_reference: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    event_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("events.event_id"), nullable=False
    )
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str | None] = mapped_column(String(50))
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_transaction_id: Mapped[str] = mapped_column(String(100), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.CONFIRMED, nullable=False
    )
    reservation_token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    # Relationships
    event: Mapped["Event"] = relationship("Event", back_populates="bookings")
    booking_seats: Mapped[list["BookingSeat"]] = relationship(
        "BookingSeat",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingSeat.booking_seat_id",
    )

    __table_args__ = (
        Index("idx_booking_event", "event_id"),
        Index("idx_customer_email", "customer_email"),
    )


class BookingSeat(Base):
    """Seat and the price it was sold at."""

    __tablename__ = "booking_seats"

    booking_seat_id: Mapped[int] = mapped_column(
        BigIntPK, primary_key=True, autoincrement=True
    )
    booking_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("bookings.booking_id"), nullable=False
    )
    seat_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("seats.seat_id"), nullable=False
    )
    seat_number: Mapped[str] = mapped_column(String(20), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="booking_seats")

    __table_args__ = (
        UniqueConstraint("booking_id", "seat_id", name="uk_booking_seat"),
        Index("idx_booking_seat_seat_id", "seat_id"),
    )
