"""API dependencies."""

from typing import Annotated, AsyncGenerator

import redis.asyncio as redis
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from seathold.config import Settings
from seathold.database import Database
from seathold.services.booking_finalizer import BookingFinalizer
from seathold.services.booking_service import BookingService
from seathold.services.reservation_service import ReservationService
from seathold.services.seat_service import SeatService


def get_database(request: Request) -> Database:
    """Database handle created by the application lifespan."""
    return request.app.state.database


def get_redis(request: Request) -> redis.Redis:
    """Redis client created by the application lifespan."""
    return request.app.state.redis


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


DatabaseDep = Annotated[Database, Depends(get_database)]
RedisClient = Annotated[redis.Redis, Depends(get_redis)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


async def get_db(database: DatabaseDep) -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped database session."""
    async with database.session() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db)]


def get_seat_service(db: DBSession) -> SeatService:
    """Get seat service."""
    return SeatService(db)


def get_booking_service(db: DBSession) -> BookingService:
    """Get booking service."""
    return BookingService(db)


def get_reservation_service(
    database: DatabaseDep,
    redis_client: RedisClient,
    settings: SettingsDep,
) -> ReservationService:
    """Get reservation service."""
    return ReservationService(database, redis_client, settings)


def get_booking_finalizer(
    database: DatabaseDep,
    redis_client: RedisClient,
    settings: SettingsDep,
) -> BookingFinalizer:
    """Get booking finalizer."""
    return BookingFinalizer(database, redis_client, settings)


# Annotated dependencies
SeatServiceDep = Annotated[SeatService, Depends(get_seat_service)]
BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
ReservationServiceDep = Annotated[ReservationService, Depends(get_reservation_service)]
BookingFinalizerDep = Annotated[BookingFinalizer, Depends(get_booking_finalizer)]
