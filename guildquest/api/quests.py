"""Quest API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from guildquest.api.deps import (
    get_identity_service,
    get_quest_service,
    raise_for_error,
)
from guildquest.api.schemas import (
    ApprovalResponse,
    ApproveRequest,
    CharacterActionRequest,
    CharacterInfo,
    ErrorResponse,
    QuestCreateRequest,
    QuestInfo,
    ResolvedRewardInfo,
)
from guildquest.core.errors import not_found, unauthorized
from guildquest.core.logging import get_logger
from guildquest.core.quest.enums import QuestStatus
from guildquest.services.identity_service import IdentityService
from guildquest.services.quest_service import QuestService
from guildquest.services.result import ServiceResult

logger = get_logger(__name__)

router = APIRouter(prefix="/quests", tags=["quests"])

ERRORS = {
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _quest_or_raise(result: ServiceResult) -> QuestInfo:
    if not result.ok:
        raise_for_error(result.error)
    return QuestInfo.from_core(result.value)


@router.post(
    "",
    response_model=QuestInfo,
    status_code=201,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def create_quest(
    request: QuestCreateRequest,
    service: QuestService = Depends(get_quest_service),
) -> QuestInfo:
    """Post a new AVAILABLE quest to a guild board."""
    result = service.create_quest(
        guild_id=request.guild_id,
        title=request.title,
        quest_type=request.quest_type,
        difficulty=request.difficulty,
        reward=request.rewards.to_core(),
        description=request.description,
    )
    return _quest_or_raise(result)


@router.get("", response_model=list[QuestInfo])
def list_quests(
    guild_id: str,
    status: Optional[QuestStatus] = Query(None),
    service: QuestService = Depends(get_quest_service),
) -> list[QuestInfo]:
    return [QuestInfo.from_core(q) for q in service.list_quests(guild_id, status)]


@router.get(
    "/{quest_id}",
    response_model=QuestInfo,
    responses={404: {"model": ErrorResponse}},
)
def get_quest(
    quest_id: str,
    service: QuestService = Depends(get_quest_service),
) -> QuestInfo:
    quest = service.get_quest(quest_id)
    if quest is None:
        raise_for_error(not_found("Quest", quest_id))
    return QuestInfo.from_core(quest)


@router.get(
    "/{quest_id}/preview",
    response_model=ResolvedRewardInfo,
    responses=ERRORS,
)
def preview_reward(
    quest_id: str,
    character_id: str,
    service: QuestService = Depends(get_quest_service),
) -> ResolvedRewardInfo:
    """
    Reward preview

    What the character would be paid if the quest were approved now,
    with every active effect applied.
    """
    result = service.preview_reward(quest_id, character_id)
    if not result.ok:
        raise_for_error(result.error)
    return ResolvedRewardInfo.from_core(result.value)


@router.post("/{quest_id}/accept", response_model=QuestInfo, responses=ERRORS)
def accept_quest(
    quest_id: str,
    request: CharacterActionRequest,
    service: QuestService = Depends(get_quest_service),
) -> QuestInfo:
    return _quest_or_raise(service.accept_quest(quest_id, request.character_id))


@router.post("/{quest_id}/complete", response_model=QuestInfo, responses=ERRORS)
def complete_quest(
    quest_id: str,
    request: CharacterActionRequest,
    service: QuestService = Depends(get_quest_service),
) -> QuestInfo:
    return _quest_or_raise(service.complete_quest(quest_id, request.character_id))


@router.post("/{quest_id}/abandon", response_model=QuestInfo, responses=ERRORS)
def abandon_quest(
    quest_id: str,
    request: CharacterActionRequest,
    service: QuestService = Depends(get_quest_service),
) -> QuestInfo:
    return _quest_or_raise(service.abandon_quest(quest_id, request.character_id))


@router.post("/{quest_id}/approve", response_model=ApprovalResponse, responses=ERRORS)
def approve_quest(
    quest_id: str,
    request: ApproveRequest,
    service: QuestService = Depends(get_quest_service),
    identity: IdentityService = Depends(get_identity_service),
) -> ApprovalResponse:
    """
    Guildmaster approval

    Moves a COMPLETED quest to APPROVED and credits the effect-adjusted
    reward to the assigned character. Only a GUILDMASTER of the quest's
    guild may approve.
    """
    quest = service.get_quest(quest_id)
    if quest is None:
        raise_for_error(not_found("Quest", quest_id))

    role = identity.get_role(request.member_id, quest.guild_id)
    if role is None:
        logger.info("Approve of %s by non-member %s", quest_id, request.member_id)
        raise_for_error(
            unauthorized(f"member {request.member_id} is not in guild {quest.guild_id}")
        )

    result = service.approve_quest(quest_id, role)
    if not result.ok:
        raise_for_error(result.error)

    approval = result.value
    return ApprovalResponse(
        quest=QuestInfo.from_core(approval.quest),
        character=CharacterInfo.from_core(approval.character),
        applied_reward=ResolvedRewardInfo.from_core(approval.applied_reward),
        levels_gained=approval.levels_gained,
    )
