"""RTC token issuance endpoint."""
from __future__ import annotations

from fastapi import APIRouter

from ..schemas.rtc import ErrorResponse, RtcTokenRequest, RtcTokenResponse
from ..services import rtc as rtc_service

router = APIRouter()


@router.post(
    "/token",
    response_model=RtcTokenResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_rtc_token(payload: RtcTokenRequest) -> RtcTokenResponse:
    """Return a channel access token for the requested uid and role."""

    token = await rtc_service.issue_token(
        payload.channel,
        payload.uid,
        role=payload.role,
        expire_time=payload.expire_time,
    )
    return RtcTokenResponse(
        app_id=token.app_id,
        token=token.token,
        channel=token.channel,
        uid=token.uid,
        expire_time=token.expire_time,
    )
