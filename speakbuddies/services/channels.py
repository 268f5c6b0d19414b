"""Paired two-party channels and their lifetime."""
from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

DEFAULT_MAX_DURATION_SECONDS = 10 * 60


@dataclass(frozen=True)
class Channel:
    channel_id: str
    participants: tuple[str, str]
    request_ids: tuple[str, str]
    topic: str
    started_at: float
    max_duration: float = DEFAULT_MAX_DURATION_SECONDS

    def duration(self, now: float) -> float:
        return max(0.0, now - self.started_at)

    def is_expired(self, now: float) -> bool:
        return now - self.started_at > self.max_duration


def generate_channel_id(now: float) -> str:
    """Return ``channel_<millis>_<random>``."""

    return f"channel_{int(now * 1000)}_{secrets.token_hex(5)}"


class ChannelRegistry:
    """Active channels keyed by id."""

    def __init__(self, max_duration: float = DEFAULT_MAX_DURATION_SECONDS) -> None:
        self._max_duration = max_duration
        self._channels: Dict[str, Channel] = {}

    def new_id(self, now: float) -> str:
        channel_id = generate_channel_id(now)
        while channel_id in self._channels:
            channel_id = generate_channel_id(now)
        return channel_id

    def create(
        self,
        participants: tuple[str, str],
        request_ids: tuple[str, str],
        topic: str,
        now: float,
        channel_id: Optional[str] = None,
    ) -> Channel:
        channel_id = channel_id or self.new_id(now)
        if channel_id in self._channels:
            raise ValueError(f"Channel {channel_id} already exists")
        channel = Channel(
            channel_id=channel_id,
            participants=participants,
            request_ids=request_ids,
            topic=topic,
            started_at=now,
            max_duration=self._max_duration,
        )
        self._channels[channel_id] = channel
        return channel

    def get(self, channel_id: str) -> Optional[Channel]:
        return self._channels.get(channel_id)

    def end(self, channel_id: str) -> Optional[Channel]:
        """Remove the channel if present; ending twice is harmless."""

        return self._channels.pop(channel_id, None)

    def pop_expired(self, now: float) -> list[Channel]:
        expired = [channel for channel in self._channels.values() if channel.is_expired(now)]
        for channel in expired:
            self._channels.pop(channel.channel_id, None)
        return expired

    def __contains__(self, channel_id: object) -> bool:
        return channel_id in self._channels

    def __iter__(self) -> Iterator[Channel]:
        return iter(list(self._channels.values()))

    def __len__(self) -> int:
        return len(self._channels)
