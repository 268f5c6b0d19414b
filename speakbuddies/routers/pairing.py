"""Pairing endpoints: request, poll, cancel, end and monitor."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from ..schemas.pairing import (
    AckResponse,
    ActiveChannelsResponse,
    CancelConnectionBody,
    ChannelSummary,
    EndCallBody,
    PairingResponse,
    RequestConnectionBody,
)
from ..services.matchmaking import MatchmakingEngine
from ..services.requests import ConnectionRequest, RequestState

router = APIRouter()


def get_engine(request: Request) -> MatchmakingEngine:
    return request.app.state.engine


def get_app_id(request: Request) -> str:
    return request.app.state.settings.rtc_app_id


def _to_response(connection: ConnectionRequest, app_id: str) -> PairingResponse:
    if connection.state is not RequestState.PAIRED:
        return PairingResponse(
            request_id=connection.request_id,
            paired=False,
            status=connection.state.value,
        )
    return PairingResponse(
        request_id=connection.request_id,
        paired=True,
        token=connection.credential.token if connection.credential else None,
        channel_name=connection.channel_id,
        topic=connection.topic,
        app_id=app_id,
        uid=connection.slot,
    )


@router.post("/request-connection", response_model=PairingResponse, response_model_exclude_none=True)
async def request_connection(
    payload: RequestConnectionBody | None = None,
    engine: MatchmakingEngine = Depends(get_engine),
    app_id: str = Depends(get_app_id),
) -> PairingResponse:
    """Queue the caller or pair them with the longest-waiting caller.

    A waiting caller learns about its match by polling ``/check-pairing``.
    """

    connection = await engine.request_connection(payload.user_id if payload else None)
    return _to_response(connection, app_id)


@router.post("/get-token", response_model=PairingResponse, response_model_exclude_none=True)
async def get_token(
    payload: RequestConnectionBody | None = None,
    engine: MatchmakingEngine = Depends(get_engine),
    app_id: str = Depends(get_app_id),
) -> PairingResponse:
    """Single-shot pairing.

    Only the caller that completes a pair receives credentials here. A caller
    answered with ``waiting`` is never told when someone joins it; it has to
    poll ``/check-pairing/{requestId}`` or let its request expire.
    """

    connection = await engine.request_connection(payload.user_id if payload else None)
    response = _to_response(connection, app_id)
    response.waiting = not response.paired
    return response


@router.get(
    "/check-pairing/{request_id}",
    response_model=PairingResponse,
    response_model_exclude_none=True,
)
async def check_pairing(
    request_id: str,
    engine: MatchmakingEngine = Depends(get_engine),
    app_id: str = Depends(get_app_id),
) -> PairingResponse:
    """Report whether a request has been paired yet."""

    connection = await engine.get_request(request_id)
    if connection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Request not found")
    return _to_response(connection, app_id)


@router.post("/cancel-connection", response_model=AckResponse)
async def cancel_connection(
    payload: CancelConnectionBody,
    engine: MatchmakingEngine = Depends(get_engine),
) -> AckResponse:
    await engine.cancel(payload.request_id)
    return AckResponse()


@router.post("/end-call", response_model=AckResponse)
async def end_call(
    payload: EndCallBody,
    engine: MatchmakingEngine = Depends(get_engine),
) -> AckResponse:
    await engine.end_call(payload.channel_name, payload.user_id)
    return AckResponse()


@router.get("/active-channels", response_model=ActiveChannelsResponse)
async def active_channels(engine: MatchmakingEngine = Depends(get_engine)) -> ActiveChannelsResponse:
    """Monitoring snapshot of live channels and the waiting queue."""

    overview = await engine.overview()
    channels = [
        ChannelSummary(
            channel_name=channel.channel_id,
            users=list(channel.participants),
            topic=channel.topic,
            duration=int(channel.duration(overview.now) * 1000),
            max_duration=int(channel.max_duration * 1000),
        )
        for channel in overview.channels
    ]
    return ActiveChannelsResponse(
        active_channels=len(channels),
        waiting_users=overview.waiting_count,
        total_requests=overview.request_count,
        channels=channels,
    )
