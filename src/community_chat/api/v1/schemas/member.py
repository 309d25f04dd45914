from __future__ import annotations

from pydantic import BaseModel, Field


class DeviceTokenRequest(BaseModel):
    # None or empty clears the token (logout).
    token: str | None = Field(default=None, max_length=512)


class MemberResponse(BaseModel):
    id: int
    display_name: str
    referral_id: str | None
    has_device_token: bool
