"""Background task that periodically evicts stale requests and channels."""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .matchmaking import MatchmakingEngine

logger = logging.getLogger(__name__)


class ExpirationSweeper:
    """Run ``engine.sweep()`` every ``interval`` seconds until stopped."""

    def __init__(self, engine: MatchmakingEngine, interval: float = 60.0) -> None:
        self._engine = engine
        self._interval = interval
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="expiration-sweeper")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                report = await self._engine.sweep()
            except Exception:
                logger.exception("Expiration sweep failed")
                continue
            if not report.empty:
                logger.info(
                    "Sweep evicted %d waiting requests and %d channels",
                    len(report.expired_requests),
                    len(report.expired_channels),
                )
