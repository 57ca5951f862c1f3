from datetime import datetime
from decimal import Decimal

from seathold.database import Database
from seathold.models.seat import SeatStatus
from seathold.schemas.event import EventCreate
from seathold.schemas.seat import SeatCreate
from seathold.services.seat_service import SeatService
from seathold.stores.seat_store import SeatStateStore

CUSTOMER = {"name": "Ada Lovelace", "email": "ada@example.com", "phone": "+44 20 7946 0000"}
PAYMENT = {"method": "card", "transaction_id": "txn_0001"}


async def seed_event(
    database: Database,
    seats: list[tuple[str, str]] | None = None,
    hold_ttl_seconds: int | None = None,
) -> tuple[int, dict[str, int]]:
    """Create an event; returns its id and seat ids keyed by seat number."""
    if seats is None:
        seats = [(f"A{n}", "50.00") for n in range(1, 6)]

    event_data = EventCreate(
        event_name="Symphony No. 9",
        event_date=datetime(2026, 4, 1, 20, 0),
        venue_name="Royal Hall",
        hold_ttl_seconds=hold_ttl_seconds,
        seats=[
            SeatCreate(
                seat_number=number,
                section="Stalls",
                row_number=number[0],
                price=Decimal(price),
            )
            for number, price in seats
        ],
    )
    async with database.session() as db:
        event = await SeatService(db).create_event(event_data)
        return event.event_id, {s.seat_number: s.seat_id for s in event.seats}


async def seat_statuses(database: Database, event_id: int) -> dict[str, SeatStatus]:
    async with database.session() as db:
        seats = await SeatStateStore(db).list_seats(event_id)
        return {s.seat_number: s.status for s in seats}
