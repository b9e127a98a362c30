"""RTC service abstraction.

This module turns an HTTP-level token request into a signed "007" access token
using the app credentials from settings. The issuer keeps no record of what it
minted; tokens expire on their own."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.config import settings
from .access_token import (
    AccessTokenBuilder,
    Clock,
    IssueRequest,
    RandomSource,
    secure_salt,
    system_clock,
    validate_request,
)
from .privileges import Role

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RtcToken:
    app_id: str
    token: str
    channel: str
    uid: int
    role: Role
    expire_time: int
    expires_at: int


def resolve_ttl(expire_time: int | None) -> int:
    """Missing or zero lifetimes fall back to the configured default."""

    return expire_time or settings.token_default_ttl_seconds


async def issue_token(
    channel: str,
    uid: int,
    role: str | int | None = None,
    expire_time: int | None = None,
    *,
    clock: Clock = system_clock,
    random_source: RandomSource = secure_salt,
) -> RtcToken:
    """Produce an RTC access token for one channel and uid.

    Request problems raise ``ValidationError`` before credentials are looked
    at, so a misconfigured deployment still reports client errors first.
    """

    request = IssueRequest(
        channel_name=channel,
        uid=uid,
        role=Role.parse(role),
        ttl_seconds=resolve_ttl(expire_time),
    )
    validate_request(request)

    credential = settings.credential()
    builder = AccessTokenBuilder(credential, clock=clock, random_source=random_source)
    issued = builder.build(request)

    logger.info(
        "Token generated for channel: %s, uid: %s, role: %s",
        request.channel_name,
        request.uid,
        request.role.name.lower(),
    )
    return RtcToken(
        app_id=credential.app_id,
        token=issued.token,
        channel=request.channel_name,
        uid=request.uid,
        role=request.role,
        expire_time=request.ttl_seconds,
        expires_at=issued.expires_at,
    )
