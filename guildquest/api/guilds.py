"""Guild, membership and activity feed endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from guildquest.api.deps import (
    get_activity_service,
    get_identity_service,
    raise_for_error,
)
from guildquest.api.schemas import (
    ActivityInfo,
    ErrorResponse,
    GuildCreateRequest,
    GuildInfo,
    MemberCreateRequest,
    MemberInfo,
)
from guildquest.core.quest.enums import MemberRole
from guildquest.services.activity_service import ActivityService
from guildquest.services.identity_service import IdentityService

router = APIRouter(tags=["guilds"])


@router.post("/guilds", response_model=GuildInfo, status_code=201)
def create_guild(
    request: GuildCreateRequest,
    service: IdentityService = Depends(get_identity_service),
) -> GuildInfo:
    guild = service.create_guild(request.name)
    return GuildInfo(guild_id=guild.guild_id, name=guild.name)


@router.post(
    "/guilds/{guild_id}/members",
    response_model=MemberInfo,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
)
def add_member(
    guild_id: str,
    request: MemberCreateRequest,
    service: IdentityService = Depends(get_identity_service),
) -> MemberInfo:
    result = service.add_member(guild_id, request.name, request.role)
    if not result.ok:
        raise_for_error(result.error)
    member = result.value
    return MemberInfo(
        member_id=member.member_id,
        guild_id=member.guild_id,
        name=member.name,
        role=MemberRole(member.role),
    )


@router.get("/activity", response_model=list[ActivityInfo])
def list_activity(
    guild_id: str,
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: ActivityService = Depends(get_activity_service),
) -> list[ActivityInfo]:
    """Newest first."""
    return [
        ActivityInfo(
            log_type=log.log_type,
            character_id=log.character_id,
            description=log.description,
            metadata=log.details or {},
            created_at=log.created_at,
        )
        for log in service.list_recent(guild_id, limit)
    ]
