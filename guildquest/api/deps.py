"""Request-scoped service wiring and error translation."""

from typing import NoReturn

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from guildquest.core.errors import CoreError, ErrorKind, unauthorized
from guildquest.core.event_bus import EventBus
from guildquest.core.logging import get_logger
from guildquest.core.quest.enums import MemberRole
from guildquest.db.database import get_db
from guildquest.services.activity_service import ActivityService
from guildquest.services.character_service import CharacterService
from guildquest.services.effect_service import EffectService
from guildquest.services.identity_service import IdentityService
from guildquest.services.quest_service import QuestService
from guildquest.services.shop_service import ShopService

logger = get_logger(__name__)

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.SHOP_BLOCKED: 403,
    ErrorKind.QUEST_BLOCKED: 403,
    ErrorKind.INVALID_TRANSITION: 409,
    ErrorKind.INSUFFICIENT_FUNDS: 409,
    ErrorKind.OUT_OF_STOCK: 409,
    ErrorKind.INVALID_REWARD_VALUE: 422,
    ErrorKind.INVALID_QUANTITY: 422,
    ErrorKind.INVALID_VALUE: 422,
}


def raise_for_error(error: CoreError) -> NoReturn:
    raise HTTPException(
        status_code=ERROR_STATUS.get(error.kind, 400),
        detail={"error": error.kind.value, "message": error.message},
    )


def require_guildmaster(
    identity: IdentityService, member_id: str, guild_id: str
) -> None:
    """403 unless ``member_id`` is a GUILDMASTER of ``guild_id``."""
    if identity.get_role(member_id, guild_id) != MemberRole.GUILDMASTER:
        logger.info("Guildmaster action refused for %s in %s", member_id, guild_id)
        raise_for_error(
            unauthorized(f"member {member_id} is not a guildmaster of {guild_id}")
        )


def get_event_bus(db: Session = Depends(get_db)) -> EventBus:
    """One bus per request, with the activity log already listening."""
    bus = EventBus()
    ActivityService(db, bus)
    return bus


def get_quest_service(
    db: Session = Depends(get_db), bus: EventBus = Depends(get_event_bus)
) -> QuestService:
    return QuestService(db, bus)


def get_effect_service(
    db: Session = Depends(get_db), bus: EventBus = Depends(get_event_bus)
) -> EffectService:
    return EffectService(db, bus)


def get_shop_service(
    db: Session = Depends(get_db), bus: EventBus = Depends(get_event_bus)
) -> ShopService:
    return ShopService(db, bus)


def get_character_service(db: Session = Depends(get_db)) -> CharacterService:
    return CharacterService(db)


def get_identity_service(db: Session = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


def get_activity_service(db: Session = Depends(get_db)) -> ActivityService:
    return ActivityService(db, EventBus())
