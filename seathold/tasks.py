"""Background tasks for the seat hold service."""

import asyncio
import logging
from typing import Callable

from seathold.services.reservation_service import ReservationService

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """
    Periodically releases expired holds.

    Each run:
    1. Takes expired holds out of the ledger and releases their seats
    2. Releases reserved seats whose hold time passed without a ledger entry
    """

    def __init__(
        self,
        service_factory: Callable[[], ReservationService],
        interval_seconds: float = 30,
        batch_size: int = 100,
    ):
        self.service_factory = service_factory
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self._task: asyncio.Task | None = None

    async def run_once(self) -> int:
        """Run a single sweep and return the number of seats released."""
        service = self.service_factory()
        released = await service.sweep_expired(limit=self.batch_size)
        if released > 0:
            logger.info(f"Sweep released {released} seats")
        return released

    async def _loop(self) -> None:
        logger.info("Starting expired reservation sweep task")

        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error in sweep task: {e}", exc_info=True)

            await asyncio.sleep(self.interval_seconds)

    async def start(self) -> None:
        """Start the sweep loop."""
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
            logger.info("Expiry sweeper started")

    async def stop(self) -> None:
        """Stop the sweep loop."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiry sweeper stopped")
