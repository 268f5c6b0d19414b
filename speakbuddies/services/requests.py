"""Connection requests and the in-memory registry that owns them."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional
from uuid import uuid4

from .rtc import Credential


class MatchmakingError(RuntimeError):
    """Base class for matchmaking invariant violations."""


class InvalidTransitionError(MatchmakingError):
    """Raised when a request is asked to leave a terminal state."""


class RequestState(str, enum.Enum):
    WAITING = "waiting"
    PAIRED = "paired"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


@dataclass
class ConnectionRequest:
    caller_id: str
    created_at: float
    request_id: str = field(default_factory=lambda: uuid4().hex)
    state: RequestState = RequestState.WAITING
    channel_id: Optional[str] = None
    topic: Optional[str] = None
    credential: Optional[Credential] = None
    slot: Optional[int] = None

    @property
    def is_waiting(self) -> bool:
        return self.state is RequestState.WAITING

    def mark_paired(self, channel_id: str, topic: str, slot: int, credential: Credential) -> None:
        self._leave_waiting(RequestState.PAIRED)
        self.channel_id = channel_id
        self.topic = topic
        self.slot = slot
        self.credential = credential

    def mark_cancelled(self) -> None:
        self._leave_waiting(RequestState.CANCELLED)

    def mark_expired(self) -> None:
        self._leave_waiting(RequestState.EXPIRED)

    def _leave_waiting(self, target: RequestState) -> None:
        if self.state is not RequestState.WAITING:
            raise InvalidTransitionError(
                f"Request {self.request_id} cannot move from {self.state.value} to {target.value}"
            )
        self.state = target


class RequestRegistry:
    """Requests keyed by id. Entries are deleted, never archived."""

    def __init__(self) -> None:
        self._requests: Dict[str, ConnectionRequest] = {}

    def add(self, request: ConnectionRequest) -> None:
        if request.request_id in self._requests:
            raise MatchmakingError(f"Request {request.request_id} is already registered")
        self._requests[request.request_id] = request

    def get(self, request_id: str) -> Optional[ConnectionRequest]:
        return self._requests.get(request_id)

    def discard(self, request_id: str) -> Optional[ConnectionRequest]:
        return self._requests.pop(request_id, None)

    def waiting(self) -> list[ConnectionRequest]:
        return [request for request in self._requests.values() if request.is_waiting]

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._requests

    def __iter__(self) -> Iterator[ConnectionRequest]:
        return iter(list(self._requests.values()))

    def __len__(self) -> int:
        return len(self._requests)
