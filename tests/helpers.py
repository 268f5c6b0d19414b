"""Stubs shared by the matchmaking tests."""
from __future__ import annotations

import asyncio

from speakbuddies.services.rtc import Credential


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider:
    """Records mint calls and returns predictable tokens."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []

    async def mint(self, channel_id: str, slot: int) -> Credential:
        self.calls.append((channel_id, slot))
        return Credential(token=f"token-{channel_id}-{slot}", expires_at=None)


class FailingProvider:
    async def mint(self, channel_id: str, slot: int) -> Credential:
        raise RuntimeError("signing backend unavailable")


class SlowProvider:
    async def mint(self, channel_id: str, slot: int) -> Credential:
        await asyncio.sleep(10)
        return Credential(token="too-late")
