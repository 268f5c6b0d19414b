"""RTC credential issuance.

The matchmaking engine only knows the ``CredentialProvider`` protocol. The
LiveKit-backed provider signs room-join tokens; any failure, including a slow
provider, degrades to a placeholder so a pairing is never lost over a token.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Protocol

from livekit.api import AccessToken, VideoGrants

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = "mock_token"


@dataclass(slots=True, frozen=True)
class Credential:
    token: str
    expires_at: float | None = None
    placeholder: bool = False


class CredentialProvider(Protocol):
    async def mint(self, channel_id: str, slot: int) -> Credential:
        """Return a join credential for ``slot`` in ``channel_id``."""


class LiveKitCredentialProvider:
    """Sign LiveKit access tokens for a channel/slot pair."""

    def __init__(self, api_key: str, api_secret: str, ttl_seconds: int = 3600) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._ttl_seconds = ttl_seconds

    async def mint(self, channel_id: str, slot: int) -> Credential:
        identity = str(slot)
        token = AccessToken(self._api_key, self._api_secret)
        token.with_identity(identity)
        token.with_name(identity)
        token.with_grants(
            VideoGrants(
                room_join=True,
                room=channel_id,
                can_publish=True,
                can_subscribe=True,
            )
        )
        token.with_ttl(timedelta(seconds=self._ttl_seconds))
        return Credential(token=token.to_jwt(), expires_at=time.time() + self._ttl_seconds)


def placeholder_credential(channel_id: str, slot: int) -> Credential:
    """Deterministic stand-in used whenever the provider cannot deliver."""

    return Credential(token=f"{PLACEHOLDER_PREFIX}_{channel_id}_{slot}", placeholder=True)


async def mint_credential(
    provider: CredentialProvider,
    channel_id: str,
    slot: int,
    timeout: float,
) -> Credential:
    """Mint through ``provider`` within ``timeout`` seconds, falling back to a placeholder."""

    try:
        return await asyncio.wait_for(provider.mint(channel_id, slot), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Credential provider timed out for %s slot %s; using placeholder", channel_id, slot)
    except Exception as exc:
        logger.warning("Credential provider failed for %s slot %s: %s; using placeholder", channel_id, slot, exc)
    return placeholder_credential(channel_id, slot)
