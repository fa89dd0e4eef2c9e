"""Periodic expiry of abandoned chunk sessions."""

import asyncio
from typing import Optional

from common.logging_config import get_logger
from server.sessions import ChunkSessionManager

logger = get_logger(__name__)


class SessionSweeper:
    """
    Runs ``ChunkSessionManager.sweep_expired`` every ``interval_seconds``
    until stopped. A failed sweep is logged and the next one runs on schedule.
    """

    def __init__(self, session_manager: ChunkSessionManager, interval_seconds: float):
        self.session_manager = session_manager
        self.interval_seconds = interval_seconds
        self._stopped = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            logger.warning("Session sweeper already running")
            return
        self._stopped.clear()
        self._task = asyncio.create_task(self._sweep_forever())
        logger.info(f"Session sweeper started, every {self.interval_seconds}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stopped.set()
        await self._task
        self._task = None
        logger.info("Session sweeper stopped")

    async def _wait_interval(self) -> bool:
        """Sleep one interval; True if stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stopped.wait(), timeout=self.interval_seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def _sweep_forever(self) -> None:
        while not await self._wait_interval():
            try:
                removed = await self.session_manager.sweep_expired()
            except Exception as e:
                logger.error(f"Session sweep failed: {e}", exc_info=True)
                continue
            if removed:
                logger.info(f"Expired {removed} idle upload sessions")
            else:
                logger.debug("No idle upload sessions to expire")
