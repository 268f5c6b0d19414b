"""Data contracts for the pairing endpoints.

Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestConnectionBody(CamelModel):
    user_id: str | None = Field(default=None, description="Opaque caller identifier")


class CancelConnectionBody(CamelModel):
    request_id: str = Field(..., min_length=1)


class EndCallBody(CamelModel):
    channel_name: str = Field(..., min_length=1)
    user_id: str | None = None


class AckResponse(CamelModel):
    success: bool = True


class PairingResponse(CamelModel):
    success: bool = True
    request_id: str | None = None
    paired: bool
    waiting: bool | None = None
    status: str | None = None
    token: str | None = None
    channel_name: str | None = None
    topic: str | None = None
    app_id: str | None = None
    uid: int | None = None


class ChannelSummary(CamelModel):
    channel_name: str
    users: list[str]
    topic: str
    duration: int = Field(..., ge=0, description="Milliseconds since the channel started")
    max_duration: int = Field(..., ge=0, description="Channel ceiling in milliseconds")


class ActiveChannelsResponse(CamelModel):
    success: bool = True
    active_channels: int
    waiting_users: int
    total_requests: int
    channels: list[ChannelSummary]


class HealthResponse(CamelModel):
    success: bool = True
    status: str
    timestamp: str


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
