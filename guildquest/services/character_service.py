"""Character Service"""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from guildquest.core.character.models import Character
from guildquest.core.errors import not_found, unauthorized
from guildquest.db.mappers import character_to_core
from guildquest.db.models import CharacterModel, GuildModel, MemberModel
from guildquest.services.result import ServiceResult

logger = logging.getLogger(__name__)


class CharacterService:
    def __init__(self, db: Session):
        self._db = db

    def create_character(
        self, guild_id: str, name: str, member_id: Optional[str] = None
    ) -> ServiceResult[Character]:
        """Level 1, no coins, no effects."""
        if self._db.get(GuildModel, guild_id) is None:
            return ServiceResult.failure(not_found("Guild", guild_id))
        if member_id is not None:
            member = self._db.get(MemberModel, member_id)
            if member is None:
                return ServiceResult.failure(not_found("Member", member_id))
            if member.guild_id != guild_id:
                return ServiceResult.failure(
                    unauthorized(f"member {member_id} is not in guild {guild_id}")
                )

        orm = CharacterModel(
            character_id=f"char_{uuid.uuid4().hex[:12]}",
            guild_id=guild_id,
            member_id=member_id,
            name=name,
        )
        self._db.add(orm)
        self._db.commit()
        logger.info("Character created: %s (%s)", orm.character_id, name)
        return ServiceResult.success(character_to_core(orm))

    def get_character(
        self, character_id: str, include_expired: bool = False
    ) -> Optional[Character]:
        orm = self._db.get(CharacterModel, character_id)
        if orm is None:
            return None
        return character_to_core(orm, include_expired=include_expired)
