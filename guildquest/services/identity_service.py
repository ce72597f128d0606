"""Identity Service — guilds, members and the role a member holds"""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from guildquest.core.errors import not_found
from guildquest.core.quest.enums import MemberRole
from guildquest.db.models import GuildModel, MemberModel
from guildquest.services.result import ServiceResult

logger = logging.getLogger(__name__)


class IdentityService:
    def __init__(self, db: Session):
        self._db = db

    def create_guild(self, name: str) -> GuildModel:
        guild = GuildModel(guild_id=f"guild_{uuid.uuid4().hex[:12]}", name=name)
        self._db.add(guild)
        self._db.commit()
        logger.info("Guild created: %s (%s)", guild.guild_id, name)
        return guild

    def add_member(
        self, guild_id: str, name: str, role: MemberRole = MemberRole.PLAYER
    ) -> ServiceResult[MemberModel]:
        if self._db.get(GuildModel, guild_id) is None:
            return ServiceResult.failure(not_found("Guild", guild_id))
        member = MemberModel(
            member_id=f"member_{uuid.uuid4().hex[:12]}",
            guild_id=guild_id,
            name=name,
            role=role.value,
        )
        self._db.add(member)
        self._db.commit()
        return ServiceResult.success(member)

    def get_role(self, member_id: str, guild_id: str) -> Optional[MemberRole]:
        """Role of ``member_id`` inside ``guild_id``; None if not a member."""
        member = self._db.get(MemberModel, member_id)
        if member is None or member.guild_id != guild_id:
            return None
        return MemberRole(member.role)
