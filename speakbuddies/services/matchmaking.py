"""Matchmaking engine.

Every mutation of the shared store happens under ``MatchStore.lock``: pairing,
cancellation, channel teardown and the expiration sweep. The only awaited call
made while holding it is credential minting, which is bounded by a timeout.
"""
from __future__ import annotations

import asyncio
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..core.config import Settings
from .channels import Channel, ChannelRegistry
from .requests import ConnectionRequest, RequestRegistry
from .rtc import CredentialProvider, mint_credential
from .topics import TopicSelector
from .waiting_queue import WaitingQueue

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

DEFAULT_WAITING_TIMEOUT_SECONDS = 5 * 60
DEFAULT_CREDENTIAL_TIMEOUT_SECONDS = 2.0


@dataclass
class MatchStore:
    """All process-wide pairing state behind a single lock."""

    requests: RequestRegistry = field(default_factory=RequestRegistry)
    queue: WaitingQueue = field(default_factory=WaitingQueue)
    channels: ChannelRegistry = field(default_factory=ChannelRegistry)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


@dataclass(slots=True)
class SweepReport:
    expired_requests: list[str] = field(default_factory=list)
    expired_channels: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.expired_requests and not self.expired_channels


@dataclass(slots=True)
class Overview:
    channels: list[Channel]
    waiting_count: int
    request_count: int
    now: float


def generate_caller_id(now: float) -> str:
    return f"user_{int(now * 1000)}_{secrets.token_hex(3)}"


class MatchmakingEngine:
    """Pair callers first-come first-served and manage channel lifetime."""

    def __init__(
        self,
        provider: CredentialProvider,
        store: MatchStore | None = None,
        topics: TopicSelector | None = None,
        clock: Clock = time.time,
        waiting_timeout: float = DEFAULT_WAITING_TIMEOUT_SECONDS,
        credential_timeout: float = DEFAULT_CREDENTIAL_TIMEOUT_SECONDS,
    ) -> None:
        self._provider = provider
        self._store = store or MatchStore()
        self._topics = topics or TopicSelector()
        self._clock = clock
        self._waiting_timeout = waiting_timeout
        self._credential_timeout = credential_timeout

    @property
    def store(self) -> MatchStore:
        return self._store

    async def request_connection(self, caller_id: str | None = None) -> ConnectionRequest:
        """Register a new request and pair it with the oldest waiting one, if any.

        The returned request is either ``paired`` (the caller takes slot 2) or
        ``waiting`` (the caller must poll ``get_request`` until paired).
        """

        store = self._store
        async with store.lock:
            now = self._clock()
            request = ConnectionRequest(caller_id=caller_id or generate_caller_id(now), created_at=now)
            partner = self._pop_waiting_partner()
            if partner is None:
                store.requests.add(request)
                store.queue.enqueue(request.request_id)
                logger.info("Caller %s queued as request %s", request.caller_id, request.request_id)
                return request
            try:
                await self._pair(partner, request, now)
            except BaseException:
                # Nothing was registered yet; the partner keeps its place in line.
                store.queue.push_front(partner.request_id)
                raise
            return request

    async def get_request(self, request_id: str) -> Optional[ConnectionRequest]:
        async with self._store.lock:
            return self._store.requests.get(request_id)

    async def cancel(self, request_id: str) -> bool:
        """Withdraw a waiting request. Unknown or already paired requests are left alone."""

        store = self._store
        async with store.lock:
            request = store.requests.get(request_id)
            if request is None or not request.is_waiting:
                return False
            request.mark_cancelled()
            store.queue.remove(request_id)
            store.requests.discard(request_id)
            logger.info("Request %s cancelled by caller %s", request_id, request.caller_id)
            return True

    async def end_call(self, channel_id: str, caller_id: str | None = None) -> bool:
        """Tear down a channel and delete both of its requests. Idempotent."""

        async with self._store.lock:
            channel = self._store.channels.end(channel_id)
            if channel is None:
                return False
            self._forget_requests(channel)
            logger.info("Call ended for channel %s by %s", channel_id, caller_id or "unknown caller")
            return True

    async def sweep(self) -> SweepReport:
        """Expire stale waiting requests, then tear down channels past their ceiling."""

        store = self._store
        report = SweepReport()
        async with store.lock:
            now = self._clock()
            for request in store.requests.waiting():
                if now - request.created_at > self._waiting_timeout:
                    request.mark_expired()
                    store.queue.remove(request.request_id)
                    store.requests.discard(request.request_id)
                    report.expired_requests.append(request.request_id)
                    logger.info("Removed expired waiting request %s (%s)", request.request_id, request.caller_id)

            for channel in store.channels.pop_expired(now):
                self._forget_requests(channel)
                report.expired_channels.append(channel.channel_id)
                logger.info("Removed expired channel %s", channel.channel_id)
        return report

    async def overview(self) -> Overview:
        store = self._store
        async with store.lock:
            return Overview(
                channels=list(store.channels),
                waiting_count=len(store.queue),
                request_count=len(store.requests),
                now=self._clock(),
            )

    def _pop_waiting_partner(self) -> Optional[ConnectionRequest]:
        # A queued id may outlive its request's waiting state; drop such entries.
        queue = self._store.queue
        while (candidate_id := queue.dequeue_oldest()) is not None:
            candidate = self._store.requests.get(candidate_id)
            if candidate is not None and candidate.is_waiting:
                return candidate
            logger.debug("Discarding stale queue entry %s", candidate_id)
        return None

    async def _pair(self, first: ConnectionRequest, second: ConnectionRequest, now: float) -> Channel:
        # No store mutation happens until both credentials are in hand.
        store = self._store
        channel_id = store.channels.new_id(now)
        first_credential, second_credential = await asyncio.gather(
            mint_credential(self._provider, channel_id, 1, self._credential_timeout),
            mint_credential(self._provider, channel_id, 2, self._credential_timeout),
        )
        topic = self._topics.pick()
        store.requests.add(second)
        channel = store.channels.create(
            participants=(first.caller_id, second.caller_id),
            request_ids=(first.request_id, second.request_id),
            topic=topic,
            now=now,
            channel_id=channel_id,
        )
        first.mark_paired(channel.channel_id, topic, 1, first_credential)
        second.mark_paired(channel.channel_id, topic, 2, second_credential)
        logger.info(
            "Paired %s and %s in channel %s", first.caller_id, second.caller_id, channel.channel_id
        )
        return channel

    def _forget_requests(self, channel: Channel) -> None:
        for request_id in channel.request_ids:
            self._store.requests.discard(request_id)
            self._store.queue.remove(request_id)


def build_engine(settings: Settings, provider: CredentialProvider, clock: Clock = time.time) -> MatchmakingEngine:
    """Wire an engine from application settings."""

    store = MatchStore(channels=ChannelRegistry(max_duration=settings.channel_max_duration_seconds))
    return MatchmakingEngine(
        provider=provider,
        store=store,
        clock=clock,
        waiting_timeout=settings.waiting_timeout_seconds,
        credential_timeout=settings.credential_timeout_seconds,
    )
