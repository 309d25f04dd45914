from __future__ import annotations

from fastapi import APIRouter

from community_chat.api.deps import CurrentPrincipal, DirectoryDep
from community_chat.api.v1.schemas.member import DeviceTokenRequest, MemberResponse
from community_chat.services import member_service

router = APIRouter(prefix="/api/v1/members", tags=["members"])


@router.put("/me/device-token", response_model=MemberResponse)
async def register_device_token(
    body: DeviceTokenRequest,
    principal: CurrentPrincipal,
    directory: DirectoryDep,
) -> MemberResponse:
    member = await member_service.register_device_token(principal, body.token, directory)
    return MemberResponse(
        id=member.id,
        display_name=member.display_name,
        referral_id=member.referral_id,
        has_device_token=bool(member.device_token),
    )
