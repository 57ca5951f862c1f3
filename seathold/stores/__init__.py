"""Storage layers: durable seat state and the hold ledger."""

from seathold.stores.ledger import HeldSeat, ReservationHold, ReservationLedger
from seathold.stores.seat_store import SeatStateStore

__all__ = [
    "HeldSeat",
    "ReservationHold",
    "ReservationLedger",
    "SeatStateStore",
]
