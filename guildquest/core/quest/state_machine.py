"""Quest state machine

    AVAILABLE --accept--> IN_PROGRESS --complete--> COMPLETED --approve--> APPROVED
        ^                     |
        +-------abandon-------+

No other edges exist. Each operation validates everything first and only
then writes fields, so a failed call leaves the quest exactly as it was.
Operations return ``None`` on success or a ``CoreError``.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from guildquest.core.effect.models import Effect
from guildquest.core.errors import (
    CoreError,
    ErrorKind,
    invalid_transition,
    unauthorized,
)

from .enums import MemberRole, QuestStatus, QuestType
from .models import Quest

logger = logging.getLogger(__name__)

# operation -> statuses it may start from
ALLOWED_SOURCES: dict[str, frozenset[QuestStatus]] = {
    "accept": frozenset({QuestStatus.AVAILABLE}),
    "complete": frozenset({QuestStatus.IN_PROGRESS}),
    "approve": frozenset({QuestStatus.COMPLETED}),
    "abandon": frozenset({QuestStatus.IN_PROGRESS}),
}


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def _check_source(quest: Quest, operation: str) -> Optional[CoreError]:
    if quest.status not in ALLOWED_SOURCES[operation]:
        return invalid_transition(
            f"cannot {operation} quest {quest.quest_id} in status {quest.status.value}"
        )
    return None


def _check_assignee(quest: Quest, character_id: str) -> Optional[CoreError]:
    if quest.assigned_character_id != character_id:
        return unauthorized(
            f"quest {quest.quest_id} is not assigned to character {character_id}"
        )
    return None


def find_quest_block(
    active_effects: Iterable[Effect],
    quest_type: QuestType,
    difficulty: int,
) -> Optional[CoreError]:
    """Reason an active effect forbids taking this quest, if any."""
    for effect in active_effects:
        if not effect.is_active:
            continue
        r = effect.restrictions
        if quest_type in r.quest_types_blocked:
            return CoreError(
                ErrorKind.QUEST_BLOCKED,
                f"{quest_type.value} quests blocked by effect {effect.name or effect.effect_id}",
            )
        if r.difficult_quests_blocked and difficulty >= 2:
            return CoreError(
                ErrorKind.QUEST_BLOCKED,
                f"difficult quests blocked by effect {effect.name or effect.effect_id}",
            )
    return None


def accept(
    quest: Quest,
    character_id: str,
    active_effects: Iterable[Effect] = (),
    now: Optional[datetime] = None,
) -> Optional[CoreError]:
    """AVAILABLE -> IN_PROGRESS, assigning the quest to ``character_id``."""
    error = _check_source(quest, "accept") or find_quest_block(
        active_effects, quest.quest_type, quest.difficulty
    )
    if error is not None:
        return error

    quest.status = QuestStatus.IN_PROGRESS
    quest.assigned_character_id = character_id
    quest.started_at = _now(now)
    return None


def complete(
    quest: Quest,
    character_id: str,
    now: Optional[datetime] = None,
) -> Optional[CoreError]:
    """IN_PROGRESS -> COMPLETED. Only the assignee may complete."""
    error = _check_source(quest, "complete") or _check_assignee(quest, character_id)
    if error is not None:
        return error

    quest.status = QuestStatus.COMPLETED
    quest.completed_at = _now(now)
    return None


def check_approve(quest: Quest, caller_role: MemberRole) -> Optional[CoreError]:
    """Preconditions of ``approve`` without touching the quest."""
    error = _check_source(quest, "approve")
    if error is not None:
        return error
    if caller_role != MemberRole.GUILDMASTER:
        return unauthorized("only the guildmaster can approve quests")
    return None


def approve(
    quest: Quest,
    caller_role: MemberRole,
    now: Optional[datetime] = None,
) -> Optional[CoreError]:
    """COMPLETED -> APPROVED. Reward application is done by the ledger."""
    error = check_approve(quest, caller_role)
    if error is not None:
        return error

    quest.status = QuestStatus.APPROVED
    quest.approved_at = _now(now)
    return None


def abandon(quest: Quest, character_id: str) -> Optional[CoreError]:
    """IN_PROGRESS -> AVAILABLE, clearing the assignment and timestamps."""
    error = _check_source(quest, "abandon") or _check_assignee(quest, character_id)
    if error is not None:
        return error

    quest.status = QuestStatus.AVAILABLE
    quest.assigned_character_id = None
    quest.started_at = None
    quest.completed_at = None
    return None
