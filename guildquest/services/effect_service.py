"""Effect Service — granting effects and the daily duration tick"""

import logging
import uuid
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guildquest.config import settings
from guildquest.core.effect.models import (
    Effect,
    EffectBonuses,
    EffectMultipliers,
    EffectRestrictions,
    EffectType,
)
from guildquest.core.effect.resolver import validate_effect_payload
from guildquest.core.effect.ticker import newly_expired, tick_effects
from guildquest.core.errors import invalid_value, not_found
from guildquest.core.event_bus import EventBus, GameEvent
from guildquest.core.event_types import EventTypes
from guildquest.db.mappers import effect_to_core, effect_to_orm
from guildquest.db.models import CharacterModel, EffectModel
from guildquest.services.result import ServiceResult

logger = logging.getLogger(__name__)

SOURCE = "effect_service"


def local_today() -> date:
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


class EffectService:
    """Effect CRUD + daily tick"""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus

    def apply_effect(
        self,
        character_id: str,
        name: str,
        effect_type: EffectType,
        duration: Optional[int] = None,
        multipliers: Optional[EffectMultipliers] = None,
        restrictions: Optional[EffectRestrictions] = None,
        bonuses: Optional[EffectBonuses] = None,
        description: str = "",
        reason: Optional[str] = None,
    ) -> ServiceResult[Effect]:
        """Attach a new effect. Duration defaults to DEFAULT_EFFECT_DURATION days."""
        character = self._db.get(CharacterModel, character_id)
        if character is None:
            return ServiceResult.failure(not_found("Character", character_id))

        if duration is None:
            duration = settings.DEFAULT_EFFECT_DURATION
        if duration <= 0:
            return ServiceResult.failure(invalid_value("duration must be positive"))

        multipliers = multipliers or EffectMultipliers()
        restrictions = restrictions or EffectRestrictions()
        bonuses = bonuses or EffectBonuses()
        error = validate_effect_payload(multipliers, bonuses)
        if error is not None:
            return ServiceResult.failure(error)

        effect = Effect(
            effect_id=f"effect_{uuid.uuid4().hex[:12]}",
            character_id=character_id,
            name=name,
            description=description,
            reason=reason,
            effect_type=effect_type,
            duration=duration,
            max_duration=duration,
            multipliers=multipliers,
            restrictions=restrictions,
            bonuses=bonuses,
        )
        orm = effect_to_orm(effect)
        self._db.add(orm)
        self._commit()
        self._db.refresh(orm)

        effect = effect_to_core(orm)
        logger.info(
            "Effect %s (%s, %dd) applied to %s",
            effect.effect_id,
            effect.effect_type.value,
            duration,
            character_id,
        )
        self._emit(
            EventTypes.EFFECT_APPLIED,
            character,
            f'Effect "{name}" applied for {duration} days',
            {"effect_id": effect.effect_id, "effect_type": effect_type.value},
        )
        return ServiceResult.success(effect)

    def set_duration(self, effect_id: str, duration: int) -> ServiceResult[Effect]:
        """Guildmaster override. 0 expires the effect but keeps it for history."""
        if duration < 0:
            return ServiceResult.failure(invalid_value("duration must not be negative"))

        orm = self._db.get(EffectModel, effect_id)
        if orm is None:
            return ServiceResult.failure(not_found("Effect", effect_id))

        old = orm.duration
        orm.duration = duration
        self._commit()

        effect = effect_to_core(orm)
        self._emit(
            EventTypes.EFFECT_DURATION_CHANGED,
            orm.character,
            f"{effect.name}: {old} -> {duration} days",
            {"effect_id": effect_id, "old_duration": old, "new_duration": duration},
        )
        return ServiceResult.success(effect)

    def get_effect(self, effect_id: str) -> Optional[Effect]:
        orm = self._db.get(EffectModel, effect_id)
        if orm is None:
            return None
        return effect_to_core(orm)

    def list_effects(
        self, character_id: str, include_expired: bool = False
    ) -> list[Effect]:
        stmt = select(EffectModel).where(EffectModel.character_id == character_id)
        if not include_expired:
            stmt = stmt.where(EffectModel.duration > 0)
        stmt = stmt.order_by(EffectModel.created_at)
        return [effect_to_core(o) for o in self._db.scalars(stmt)]

    # === daily tick ===

    def tick_character(
        self, character_id: str, today: Optional[date] = None
    ) -> ServiceResult[list[Effect]]:
        """Advance one day. A second call on the same day changes nothing."""
        character = self._db.get(CharacterModel, character_id)
        if character is None:
            return ServiceResult.failure(not_found("Character", character_id))

        today = today or local_today()
        if character.effects_ticked_on == today:
            logger.debug("Character %s already ticked on %s", character_id, today)
            return ServiceResult.success([effect_to_core(e) for e in character.effects])

        before = [effect_to_core(e) for e in character.effects]
        after = tick_effects(before)
        rows = {e.effect_id: e for e in character.effects}
        for effect in after:
            rows[effect.effect_id].duration = effect.duration
        character.effects_ticked_on = today
        self._commit()

        for effect in newly_expired(before, after):
            self._emit(
                EventTypes.EFFECT_EXPIRED,
                character,
                f'Effect "{effect.name}" wore off',
                {"effect_id": effect.effect_id},
            )
        return ServiceResult.success(after)

    def tick_all(self, today: Optional[date] = None) -> int:
        """Scheduler entry point. Returns how many characters were ticked."""
        today = today or local_today()
        ids = self._db.scalars(
            select(CharacterModel.character_id).where(
                (CharacterModel.effects_ticked_on.is_(None))
                | (CharacterModel.effects_ticked_on != today)
            )
        ).all()
        for character_id in ids:
            self.tick_character(character_id, today)
        logger.info("Daily tick %s: %d characters", today, len(ids))
        return len(ids)

    # === internals ===

    def _commit(self) -> None:
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            logger.exception("Commit failed, rolled back")
            raise

    def _emit(
        self,
        event_type: str,
        character: CharacterModel,
        description: str,
        data: dict,
    ) -> None:
        self._bus.emit(
            GameEvent(
                event_type=event_type,
                data=data,
                source=SOURCE,
                guild_id=character.guild_id,
                character_id=character.character_id,
                description=description,
            )
        )
