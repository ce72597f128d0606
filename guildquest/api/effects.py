"""Effect API endpoints."""

from fastapi import APIRouter, Depends

from guildquest.api.deps import (
    get_character_service,
    get_effect_service,
    get_identity_service,
    raise_for_error,
    require_guildmaster,
)
from guildquest.api.schemas import (
    DurationUpdateRequest,
    EffectCreateRequest,
    EffectInfo,
    ErrorResponse,
    TickRequest,
    TickResponse,
)
from guildquest.core.errors import not_found
from guildquest.core.logging import get_logger
from guildquest.services.character_service import CharacterService
from guildquest.services.effect_service import EffectService
from guildquest.services.identity_service import IdentityService

logger = get_logger(__name__)

router = APIRouter(prefix="/effects", tags=["effects"])


@router.post(
    "",
    response_model=EffectInfo,
    status_code=201,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
def apply_effect(
    request: EffectCreateRequest,
    service: EffectService = Depends(get_effect_service),
    characters: CharacterService = Depends(get_character_service),
    identity: IdentityService = Depends(get_identity_service),
) -> EffectInfo:
    """
    Apply an effect

    Buffs, debuffs and punishments share one shape: optional multipliers,
    restrictions and bonuses. Duration is in days and defaults to 7.
    Only a GUILDMASTER of the character's guild may apply effects.
    """
    character = characters.get_character(request.character_id)
    if character is None:
        raise_for_error(not_found("Character", request.character_id))
    require_guildmaster(identity, request.member_id, character.guild_id)

    multipliers, restrictions, bonuses = request.core_payload()
    result = service.apply_effect(
        character_id=request.character_id,
        name=request.name,
        effect_type=request.effect_type,
        duration=request.duration,
        multipliers=multipliers,
        restrictions=restrictions,
        bonuses=bonuses,
        description=request.description,
        reason=request.reason,
    )
    if not result.ok:
        raise_for_error(result.error)
    return EffectInfo.from_core(result.value)


@router.get("", response_model=list[EffectInfo])
def list_effects(
    character_id: str,
    include_expired: bool = False,
    service: EffectService = Depends(get_effect_service),
) -> list[EffectInfo]:
    effects = service.list_effects(character_id, include_expired=include_expired)
    return [EffectInfo.from_core(e) for e in effects]


@router.put(
    "/{effect_id}/duration",
    response_model=EffectInfo,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def set_duration(
    effect_id: str,
    request: DurationUpdateRequest,
    service: EffectService = Depends(get_effect_service),
    characters: CharacterService = Depends(get_character_service),
    identity: IdentityService = Depends(get_identity_service),
) -> EffectInfo:
    """Override the remaining days. 0 expires the effect. Guildmaster only."""
    effect = service.get_effect(effect_id)
    if effect is None:
        raise_for_error(not_found("Effect", effect_id))
    character = characters.get_character(effect.character_id)
    require_guildmaster(identity, request.member_id, character.guild_id)

    result = service.set_duration(effect_id, request.duration)
    if not result.ok:
        raise_for_error(result.error)
    return EffectInfo.from_core(result.value)


@router.post(
    "/tick",
    response_model=TickResponse,
    responses={404: {"model": ErrorResponse}},
)
def tick(
    request: TickRequest,
    service: EffectService = Depends(get_effect_service),
) -> TickResponse:
    """
    Daily tick

    With a character_id only that character is advanced; otherwise every
    character not yet ticked today. Repeating the call on the same day is
    a no-op.
    """
    if request.character_id is None:
        count = service.tick_all(request.day)
        return TickResponse(ticked=count)

    result = service.tick_character(request.character_id, request.day)
    if not result.ok:
        raise_for_error(result.error)
    logger.info("Manual tick for %s", request.character_id)
    return TickResponse(
        ticked=1, effects=[EffectInfo.from_core(e) for e in result.value]
    )
