"""Schemas for RTC token issuance."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class RtcTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    channel: StrictStr = Field(min_length=1, description="Channel the token grants access to")
    uid: StrictInt = Field(ge=0, le=0xFFFFFFFF, description="Numeric user id; 0 is valid")
    role: StrictStr | StrictInt | None = Field(default=None, description="publisher (default) or subscriber")
    expire_time: StrictInt | None = Field(
        default=None,
        le=0xFFFFFFFF,
        alias="expireTime",
        description="Seconds until expiry; missing or 0 uses the server default",
    )


class RtcTokenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app_id: str = Field(alias="appId")
    token: str
    channel: str
    uid: int
    expire_time: int = Field(alias="expireTime")


class ErrorResponse(BaseModel):
    error: str
