"""Reservations API endpoints."""

from fastapi import APIRouter, Response, status

from seathold.api.v1.dependencies import ReservationServiceDep
from seathold.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    ReservationVerifyResponse,
)
from seathold.schemas.seat import HeldSeatResponse

router = APIRouter()


@router.post(
    "",
    response_model=ReservationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Hold seats",
)
async def reserve_seats(
    reservation_data: ReservationCreate,
    reservation_service: ReservationServiceDep,
) -> ReservationResponse:
    """
    Hold seats for a limited time.

    Either every requested seat is held or none is. The returned token is
    needed to confirm or cancel the hold.
    """
    hold = await reservation_service.reserve(
        event_id=reservation_data.event_id,
        seat_ids=reservation_data.seat_ids,
    )

    return ReservationResponse(
        token=hold.token,
        event_id=hold.event_id,
        seats=[HeldSeatResponse.model_validate(s) for s in hold.seats],
        total_amount=hold.total_amount,
        expires_at=hold.expires_at,
        expires_in=hold.remaining_seconds(hold.created_at),
    )


@router.get(
    "/{token}",
    response_model=ReservationVerifyResponse,
    summary="Verify hold",
)
async def verify_reservation(
    token: str,
    reservation_service: ReservationServiceDep,
) -> ReservationVerifyResponse:
    """Report whether a hold is still valid and how long it has left."""
    result = await reservation_service.verify(token)
    if not result.valid:
        return ReservationVerifyResponse(valid=False)

    hold = result.hold
    return ReservationVerifyResponse(
        valid=True,
        remaining_seconds=result.remaining_seconds,
        event_id=hold.event_id,
        seats=[HeldSeatResponse.model_validate(s) for s in hold.seats],
        total_amount=hold.total_amount,
        expires_at=hold.expires_at,
    )


@router.delete(
    "/{token}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel hold",
)
async def cancel_reservation(
    token: str,
    reservation_service: ReservationServiceDep,
) -> Response:
    """Release a hold's seats. Safe to repeat."""
    await reservation_service.cancel(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
