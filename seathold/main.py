"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from seathold.api.v1.router import router as v1_router
from seathold.config import Settings, get_settings
from seathold.database import Database
from seathold.exceptions import ErrorCategory, ReservationError
from seathold.redis_client import close_redis, create_redis
from seathold.services.reservation_service import ReservationService
from seathold.tasks import ExpirySweeper

logger = logging.getLogger(__name__)

STATUS_BY_CATEGORY = {
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.CONFLICT: 409,
    ErrorCategory.EXPIRED: 410,
    ErrorCategory.VALIDATION: 422,
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings: Settings = app.state.settings
    logger.info("Starting %s...", settings.APP_NAME)

    owns_database = getattr(app.state, "database", None) is None
    owns_redis = getattr(app.state, "redis", None) is None

    if owns_database:
        app.state.database = Database(settings.database_url, echo=settings.DEBUG)
        await app.state.database.create_all()
    if owns_redis:
        app.state.redis = create_redis(settings)
        await app.state.redis.ping()
        logger.info("Redis connection established")

    sweeper = None
    if settings.SWEEP_ENABLED:
        sweeper = ExpirySweeper(
            lambda: ReservationService(app.state.database, app.state.redis, settings),
            interval_seconds=settings.SWEEP_INTERVAL_SECONDS,
        )
        await sweeper.start()

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)

    if sweeper is not None:
        await sweeper.stop()
    if owns_redis:
        await close_redis(app.state.redis)
        logger.info("Redis connection closed")
    if owns_database:
        await app.state.database.dispose()


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    redis_client: redis.Redis | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Store handles passed in are used as-is and left open on shutdown;
    missing ones are created from settings when the app starts.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
## Seat Hold API

Temporary seat holds that expire unless confirmed into bookings.

### Workflow
1. Load the seat map of an event
2. Hold up to 10 seats (`POST /api/v1/reservations`), receiving a token
3. Check the hold and its remaining time (`GET /api/v1/reservations/{token}`)
4. Confirm with customer and payment details (`POST /api/v1/bookings/confirm`)
   or release the seats (`DELETE /api/v1/reservations/{token}`)

Holds not confirmed in time are released automatically.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.redis = redis_client

    app.include_router(v1_router, prefix="/api")

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.APP_VERSION,
        }

    @app.exception_handler(ReservationError)
    async def reservation_error_handler(request: Request, exc: ReservationError):
        """Map reservation errors to responses by category."""
        return JSONResponse(
            status_code=STATUS_BY_CATEGORY[exc.category],
            content={"error": exc.code, "detail": exc.message, **exc.details()},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc) if settings.DEBUG else None,
            },
        )

    return app


def run():
    """Run the application with uvicorn."""
    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(
        create_app(settings),
        host="0.0.0.0",
        port=8000,
    )


if __name__ == "__main__":
    run()
