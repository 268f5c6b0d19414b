"""FIFO queue of request ids waiting for a partner."""
from __future__ import annotations

from collections import OrderedDict
from typing import Iterator, Optional


class WaitingQueue:
    """Insertion-ordered queue that also supports removal from the middle."""

    def __init__(self) -> None:
        self._entries: OrderedDict[str, None] = OrderedDict()

    def enqueue(self, request_id: str) -> None:
        if request_id in self._entries:
            raise ValueError(f"Request {request_id} is already waiting")
        self._entries[request_id] = None

    def push_front(self, request_id: str) -> None:
        if request_id in self._entries:
            raise ValueError(f"Request {request_id} is already waiting")
        self._entries[request_id] = None
        self._entries.move_to_end(request_id, last=False)

    def dequeue_oldest(self) -> Optional[str]:
        if not self._entries:
            return None
        request_id, _ = self._entries.popitem(last=False)
        return request_id

    def remove(self, request_id: str) -> None:
        self._entries.pop(request_id, None)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
