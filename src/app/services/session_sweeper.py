"""
Session Sweeper

Recurring background task that deletes expired and revoked sessions.
"""

import asyncio
import logging
from typing import AsyncContextManager, Callable, Optional

from src.app.services.session_store import SessionStore
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 60 * 60


class SessionSweeper:
    """
    Runs SessionStore.sweep once at start and then every interval.

    Each pass opens its own unit of work, so the sweep never shares a
    transaction with request handling. A failed pass is logged and the
    next pass runs on schedule.
    """

    def __init__(
        self,
        uow_factory: Callable[[], AsyncContextManager[UnitOfWork]],
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ):
        self.uow_factory = uow_factory
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        async with self.uow_factory() as uow:
            return await SessionStore(uow).sweep()

    async def start(self) -> None:
        if self.running:
            logger.warning("Session sweeper already running")
            return

        self._task = asyncio.create_task(self._run_loop())
        logger.info(f"Session sweeper scheduled every {self.interval_seconds}s")

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Session sweeper stopped")

    async def _run_loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as exc:
                logger.error(f"Session sweep failed: {exc}")

            await asyncio.sleep(self.interval_seconds)
