"""Character API endpoints."""

from fastapi import APIRouter, Depends

from guildquest.api.deps import get_character_service, raise_for_error
from guildquest.api.schemas import CharacterCreateRequest, CharacterInfo, ErrorResponse
from guildquest.core.errors import not_found
from guildquest.services.character_service import CharacterService

router = APIRouter(prefix="/characters", tags=["characters"])


@router.post(
    "",
    response_model=CharacterInfo,
    status_code=201,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def create_character(
    request: CharacterCreateRequest,
    service: CharacterService = Depends(get_character_service),
) -> CharacterInfo:
    result = service.create_character(
        request.guild_id, request.name, member_id=request.member_id
    )
    if not result.ok:
        raise_for_error(result.error)
    return CharacterInfo.from_core(result.value)


@router.get(
    "/{character_id}",
    response_model=CharacterInfo,
    responses={404: {"model": ErrorResponse}},
)
def get_character(
    character_id: str,
    service: CharacterService = Depends(get_character_service),
) -> CharacterInfo:
    """Current level, balances and active effects."""
    character = service.get_character(character_id)
    if character is None:
        raise_for_error(not_found("Character", character_id))
    return CharacterInfo.from_core(character)
