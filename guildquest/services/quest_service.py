"""Quest Service — connects the quest state machine and reward ledger to the DB

Service -> Core and Service -> DB are allowed.
Service -> Service is not; cross-service effects travel over the EventBus.

Every transition is persisted with a conditional UPDATE keyed on the quest's
version and source status. When another request got there first the UPDATE
matches no row, the session is rolled back and the caller gets
INVALID_TRANSITION, so an approval's reward is credited exactly once.
"""

import logging
import uuid
from dataclasses import replace
from typing import Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guildquest.core.character.models import Character
from guildquest.core.character.progression import apply_level_ups
from guildquest.core.effect.resolver import (
    ResolvedReward,
    resolve_reward,
    validate_reward,
)
from guildquest.core.errors import (
    CoreError,
    invalid_transition,
    invalid_value,
    not_found,
    unauthorized,
)
from guildquest.core.event_bus import EventBus, GameEvent
from guildquest.core.event_types import EventTypes
from guildquest.core.quest import state_machine
from guildquest.core.quest.enums import DIFFICULTIES, MemberRole, QuestStatus, QuestType
from guildquest.core.quest.models import Quest, Reward
from guildquest.core.quest.state_machine import find_quest_block
from guildquest.core.reward.ledger import ApprovalResult, approve_and_reward
from guildquest.db.mappers import (
    character_credit_values,
    character_to_core,
    quest_state_values,
    quest_to_core,
)
from guildquest.db.models import CharacterModel, GuildModel, QuestModel
from guildquest.services.result import ServiceResult

logger = logging.getLogger(__name__)

SOURCE = "quest_service"


class QuestService:
    """Quest CRUD + lifecycle transitions"""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus

    # === Quest CRUD ===

    def create_quest(
        self,
        guild_id: str,
        title: str,
        quest_type: QuestType,
        difficulty: int,
        reward: Reward,
        description: str = "",
    ) -> ServiceResult[Quest]:
        """New AVAILABLE quest. The reward is validated before anything is written."""
        if self._db.get(GuildModel, guild_id) is None:
            return ServiceResult.failure(not_found("Guild", guild_id))
        if difficulty not in DIFFICULTIES:
            return ServiceResult.failure(
                invalid_value(f"difficulty must be one of {DIFFICULTIES}")
            )

        error = validate_reward(reward)
        if error is not None:
            return ServiceResult.failure(error)

        orm = QuestModel(
            quest_id=f"quest_{uuid.uuid4().hex[:12]}",
            guild_id=guild_id,
            title=title,
            description=description,
            quest_type=quest_type.value,
            difficulty=difficulty,
            status=QuestStatus.AVAILABLE.value,
            exp_reward=reward.exp,
            bronze_reward=reward.bronze,
            silver_reward=reward.silver,
            gold_reward=reward.gold,
            version=0,
        )
        self._db.add(orm)
        self._commit()
        self._db.refresh(orm)

        quest = quest_to_core(orm)
        logger.info("Quest created: %s (%s)", quest.quest_id, quest.quest_type.value)
        self._emit(
            EventTypes.QUEST_CREATED,
            quest,
            None,
            f'Quest "{quest.title}" posted',
            {"quest_id": quest.quest_id},
        )
        return ServiceResult.success(quest)

    def get_quest(self, quest_id: str) -> Optional[Quest]:
        orm = self._db.get(QuestModel, quest_id)
        if orm is None:
            return None
        return quest_to_core(orm)

    def list_quests(
        self, guild_id: str, status: Optional[QuestStatus] = None
    ) -> list[Quest]:
        stmt = select(QuestModel).where(QuestModel.guild_id == guild_id)
        if status is not None:
            stmt = stmt.where(QuestModel.status == status.value)
        stmt = stmt.order_by(QuestModel.created_at)
        return [quest_to_core(o) for o in self._db.scalars(stmt)]

    def preview_reward(
        self, quest_id: str, character_id: str
    ) -> ServiceResult[ResolvedReward]:
        """What approving this quest would pay the character right now."""
        quest = self.get_quest(quest_id)
        if quest is None:
            return ServiceResult.failure(not_found("Quest", quest_id))
        orm = self._db.get(CharacterModel, character_id)
        if orm is None:
            return ServiceResult.failure(not_found("Character", character_id))

        character = character_to_core(orm)
        block = find_quest_block(
            character.active_effects, quest.quest_type, quest.difficulty
        )
        if block is not None and quest.status == QuestStatus.AVAILABLE:
            return ServiceResult.failure(block)

        return ServiceResult.success(
            resolve_reward(
                quest.base_reward,
                character.active_effects,
                quest.quest_type,
                quest.difficulty,
            )
        )

    # === Lifecycle ===

    def accept_quest(self, quest_id: str, character_id: str) -> ServiceResult[Quest]:
        """AVAILABLE -> IN_PROGRESS."""
        return self._transition(
            quest_id,
            character_id,
            EventTypes.QUEST_ACCEPTED,
            lambda quest, character: state_machine.accept(
                quest, character.character_id, character.active_effects
            ),
            'Accepted quest "{title}"',
        )

    def complete_quest(self, quest_id: str, character_id: str) -> ServiceResult[Quest]:
        """IN_PROGRESS -> COMPLETED, waiting for the guildmaster."""
        return self._transition(
            quest_id,
            character_id,
            EventTypes.QUEST_COMPLETED,
            lambda quest, character: state_machine.complete(
                quest, character.character_id
            ),
            'Completed quest "{title}", awaiting approval',
        )

    def abandon_quest(self, quest_id: str, character_id: str) -> ServiceResult[Quest]:
        """IN_PROGRESS -> AVAILABLE."""
        return self._transition(
            quest_id,
            character_id,
            EventTypes.QUEST_ABANDONED,
            lambda quest, character: state_machine.abandon(
                quest, character.character_id
            ),
            'Abandoned quest "{title}"',
        )

    def approve_quest(
        self, quest_id: str, caller_role: MemberRole
    ) -> ServiceResult[ApprovalResult]:
        """COMPLETED -> APPROVED and credit the reward, in one transaction."""
        quest_orm = self._db.get(QuestModel, quest_id)
        if quest_orm is None:
            return ServiceResult.failure(not_found("Quest", quest_id))

        quest = quest_to_core(quest_orm)
        expected_version = quest.version
        source_status = quest.status

        error = state_machine.check_approve(quest, caller_role)
        if error is not None:
            return self._reject(quest, "approve", error)

        if quest.assigned_character_id is None:
            return self._reject(
                quest,
                "approve",
                invalid_transition(f"quest {quest_id} has no assigned character"),
            )

        character_orm = self._lock_character(quest.assigned_character_id)
        if character_orm is None:
            return self._reject(
                quest, "approve", not_found("Character", quest.assigned_character_id)
            )

        result, error = approve_and_reward(
            quest, character_to_core(character_orm), caller_role
        )
        if error is not None:
            return self._reject(quest, "approve", error)

        try:
            if not self._save_transition(quest, expected_version, source_status):
                self._db.rollback()
                return self._reject(
                    quest, "approve", invalid_transition(f"quest {quest_id} changed")
                )
            character, levels_gained = self._credit_character(
                quest.assigned_character_id, result.applied_reward
            )
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            logger.exception("Approve failed, rolled back: %s", quest_id)
            raise

        quest.version = expected_version + 1
        result = replace(
            result,
            character=character,
            levels_gained=levels_gained,
        )
        reward = result.applied_reward.as_reward()
        self._emit(
            EventTypes.QUEST_APPROVED,
            quest,
            result.character.character_id,
            f'Quest "{quest.title}" approved, rewards granted',
            {"quest_id": quest.quest_id, "rewards": reward.as_dict()},
        )
        if result.levels_gained:
            self._emit(
                EventTypes.LEVEL_UP,
                quest,
                result.character.character_id,
                f"Reached level {result.character.level}",
                {
                    "level": result.character.level,
                    "levels_gained": result.levels_gained,
                },
            )
        return ServiceResult.success(result)

    # === internals ===

    def _transition(
        self,
        quest_id: str,
        character_id: str,
        event_type: str,
        operation: Callable[[Quest, Character], Optional[CoreError]],
        description: str,
    ) -> ServiceResult[Quest]:
        """Load, run one state-machine operation, persist conditionally."""
        quest_orm = self._db.get(QuestModel, quest_id)
        if quest_orm is None:
            return ServiceResult.failure(not_found("Quest", quest_id))

        character_orm = self._db.get(CharacterModel, character_id)
        if character_orm is None:
            return ServiceResult.failure(not_found("Character", character_id))

        quest = quest_to_core(quest_orm)
        op_name = event_type.removeprefix("quest_")
        if character_orm.guild_id != quest.guild_id:
            return self._reject(
                quest,
                op_name,
                unauthorized(f"character {character_id} is not in the quest's guild"),
            )

        expected_version = quest.version
        source_status = quest.status

        error = operation(quest, character_to_core(character_orm))
        if error is not None:
            return self._reject(quest, op_name, error)

        try:
            if not self._save_transition(quest, expected_version, source_status):
                self._db.rollback()
                return self._reject(
                    quest, op_name, invalid_transition(f"quest {quest_id} changed")
                )
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            logger.exception("Quest %s failed, rolled back: %s", op_name, quest_id)
            raise

        quest.version = expected_version + 1
        logger.info(
            "Quest %s: %s -> %s (character=%s)",
            quest_id,
            source_status.value,
            quest.status.value,
            character_id,
        )
        self._emit(
            event_type,
            quest,
            character_id,
            description.format(title=quest.title),
            {"quest_id": quest_id},
        )
        return ServiceResult.success(quest)

    def _save_transition(
        self, quest: Quest, expected_version: int, source_status: QuestStatus
    ) -> bool:
        """Conditional UPDATE. False when someone else moved the quest first."""
        stmt = (
            update(QuestModel)
            .where(
                QuestModel.quest_id == quest.quest_id,
                QuestModel.version == expected_version,
                QuestModel.status == source_status.value,
            )
            .values(**quest_state_values(quest), version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        return self._db.execute(stmt).rowcount == 1

    def _credit_character(
        self, character_id: str, reward: ResolvedReward
    ) -> tuple[Character, int]:
        """Add the reward to the stored balances, then level up the fresh row.

        Runs inside the approve transaction after the quest UPDATE, so the
        row is write-locked from here to commit.
        """
        self._db.execute(
            update(CharacterModel)
            .where(CharacterModel.character_id == character_id)
            .values(**character_credit_values(reward))
            .execution_options(synchronize_session=False)
        )
        orm = self._lock_character(character_id)
        character = character_to_core(orm)
        start_level = character.level
        apply_level_ups(character)
        orm.level = character.level
        orm.experience = character.experience
        return character, character.level - start_level

    def _lock_character(self, character_id: str) -> Optional[CharacterModel]:
        """Fresh row, locked until commit where the backend supports it."""
        stmt = (
            select(CharacterModel)
            .where(CharacterModel.character_id == character_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self._db.scalars(stmt).first()

    def _reject(self, quest: Quest, operation: str, error: CoreError) -> ServiceResult:
        logger.info(
            "Quest %s %s rejected: %s", quest.quest_id, operation, error.kind.value
        )
        return ServiceResult.failure(error)

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
        quest: Quest,
        character_id: Optional[str],
        description: str,
        data: dict,
    ) -> None:
        self._bus.emit(
            GameEvent(
                event_type=event_type,
                data=data,
                source=SOURCE,
                guild_id=quest.guild_id,
                character_id=character_id,
                description=description,
            )
        )
