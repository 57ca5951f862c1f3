"""Bookings API endpoints."""

from fastapi import APIRouter, status

from seathold.api.v1.dependencies import BookingFinalizerDep, BookingServiceDep
from seathold.schemas.booking import BookingConfirmRequest, BookingResponse

router = APIRouter()


@router.post(
    "/confirm",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Confirm hold",
)
async def confirm_booking(
    confirm_data: BookingConfirmRequest,
    booking_finalizer: BookingFinalizerDep,
) -> BookingResponse:
    """
    Turn a hold into a booking.

    Called after the payment has been authorized.
    """
    booking = await booking_finalizer.confirm(
        token=confirm_data.reservation_token,
        customer=confirm_data.customer,
        payment=confirm_data.payment,
    )
    return BookingResponse.model_validate(booking)


@router.get(
    "/reference/{reference}",
    response_model=BookingResponse,
    summary="Get booking by reference",
)
async def get_booking_by_reference(
    reference: str,
    booking_service: BookingServiceDep,
) -> BookingResponse:
    """Get booking by booking reference."""
    booking = await booking_service.get_booking_by_reference(reference)
    return BookingResponse.model_validate(booking)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get booking details",
)
async def get_booking(
    booking_id: int,
    booking_service: BookingServiceDep,
) -> BookingResponse:
    """Get booking details with seats."""
    booking = await booking_service.get_booking(booking_id)
    return BookingResponse.model_validate(booking)
