"""Tests for request state transitions and the channel registry."""
from __future__ import annotations

import pytest

from speakbuddies.services.channels import ChannelRegistry
from speakbuddies.services.requests import (
    ConnectionRequest,
    InvalidTransitionError,
    MatchmakingError,
    RequestRegistry,
    RequestState,
)
from speakbuddies.services.rtc import Credential


def test_request_ids_are_unique():
    first = ConnectionRequest(caller_id="alice", created_at=0.0)
    second = ConnectionRequest(caller_id="alice", created_at=0.0)

    assert first.request_id != second.request_id
    assert first.state is RequestState.WAITING


def test_paired_request_cannot_be_paired_again():
    request = ConnectionRequest(caller_id="alice", created_at=0.0)
    request.mark_paired("channel-1", "topic", 1, Credential(token="t"))

    with pytest.raises(InvalidTransitionError):
        request.mark_paired("channel-2", "topic", 2, Credential(token="t"))
    with pytest.raises(InvalidTransitionError):
        request.mark_cancelled()

    assert request.channel_id == "channel-1"
    assert request.slot == 1


def test_expired_request_never_returns_to_waiting():
    request = ConnectionRequest(caller_id="alice", created_at=0.0)
    request.mark_expired()

    with pytest.raises(InvalidTransitionError):
        request.mark_expired()
    assert request.state is RequestState.EXPIRED
    assert request.channel_id is None


def test_registry_lists_only_waiting_requests():
    registry = RequestRegistry()
    waiting = ConnectionRequest(caller_id="alice", created_at=0.0)
    paired = ConnectionRequest(caller_id="bob", created_at=0.0)
    paired.mark_paired("channel-1", "topic", 2, Credential(token="t"))
    registry.add(waiting)
    registry.add(paired)

    assert registry.waiting() == [waiting]
    assert len(registry) == 2

    with pytest.raises(MatchmakingError):
        registry.add(waiting)

    assert registry.discard(waiting.request_id) is waiting
    assert registry.discard(waiting.request_id) is None


def test_channel_registry_create_and_end_is_idempotent():
    registry = ChannelRegistry(max_duration=600)
    channel = registry.create(("alice", "bob"), ("r1", "r2"), "topic", now=100.0)

    assert channel.channel_id.startswith("channel_100000_")
    assert registry.get(channel.channel_id) is channel
    assert registry.end(channel.channel_id) is channel
    assert registry.end(channel.channel_id) is None
    assert len(registry) == 0


def test_channel_expiry_is_strictly_after_max_duration():
    registry = ChannelRegistry(max_duration=600)
    channel = registry.create(("alice", "bob"), ("r1", "r2"), "topic", now=0.0)

    assert not channel.is_expired(600.0)
    assert channel.is_expired(600.5)
    assert registry.pop_expired(600.0) == []
    assert registry.pop_expired(601.0) == [channel]
    assert channel.channel_id not in registry


def test_channel_can_be_created_with_preallocated_id():
    registry = ChannelRegistry(max_duration=600)
    channel_id = registry.new_id(5.0)

    assert channel_id not in registry
    channel = registry.create(("alice", "bob"), ("r1", "r2"), "topic", now=5.0, channel_id=channel_id)

    assert channel.channel_id == channel_id
    with pytest.raises(ValueError):
        registry.create(("carol", "dave"), ("r3", "r4"), "topic", now=6.0, channel_id=channel_id)
