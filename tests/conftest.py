"""Fixtures for matchmaking tests."""
from __future__ import annotations

import random

import pytest

from speakbuddies.services.channels import ChannelRegistry
from speakbuddies.services.matchmaking import MatchmakingEngine, MatchStore
from speakbuddies.services.topics import TopicSelector

from tests.helpers import FakeClock, StubProvider


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def engine(clock: FakeClock, provider: StubProvider) -> MatchmakingEngine:
    return MatchmakingEngine(
        provider=provider,
        store=MatchStore(channels=ChannelRegistry(max_duration=600)),
        topics=TopicSelector(rng=random.Random(7)),
        clock=clock,
        waiting_timeout=300,
        credential_timeout=0.05,
    )
