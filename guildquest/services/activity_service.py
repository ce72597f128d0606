"""Activity Service — audit sink fed by the EventBus

Subscribes to every EventTypes value and stores one ActivityLog row per
event. Publishers never wait on or hear about failures here.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guildquest.config import settings
from guildquest.core.event_bus import EventBus, GameEvent
from guildquest.core.event_types import EventTypes
from guildquest.db.models import ActivityLogModel

logger = logging.getLogger(__name__)


class ActivityService:
    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus
        self._bus.subscribe_many(EventTypes.all(), self.record)

    def record(self, event: GameEvent) -> None:
        self._db.add(
            ActivityLogModel(
                guild_id=event.guild_id,
                character_id=event.character_id,
                log_type=event.event_type,
                description=event.description,
                details=dict(event.data),
            )
        )
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise

    def list_recent(
        self, guild_id: str, limit: Optional[int] = None
    ) -> list[ActivityLogModel]:
        stmt = (
            select(ActivityLogModel)
            .where(ActivityLogModel.guild_id == guild_id)
            .order_by(ActivityLogModel.created_at.desc(), ActivityLogModel.id.desc())
            .limit(limit or settings.ACTIVITY_PAGE_SIZE)
        )
        return list(self._db.scalars(stmt))
