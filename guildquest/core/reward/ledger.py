"""Reward ledger — applies an approved quest's resolved reward to a character."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from guildquest.core.character.models import Character
from guildquest.core.character.progression import apply_level_ups
from guildquest.core.effect.resolver import ResolvedReward, resolve_reward, validate_reward
from guildquest.core.errors import CoreError, invalid_transition, unauthorized
from guildquest.core.quest.enums import MemberRole, QuestStatus
from guildquest.core.quest.models import Quest
from guildquest.core.quest.state_machine import approve, check_approve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    character: Character  # state after reward and level-ups
    reward: ResolvedReward
    levels_gained: int


@dataclass(frozen=True)
class ApprovalResult:
    quest: Quest
    character: Character
    applied_reward: ResolvedReward
    levels_gained: int = 0


def _check_ledger(quest: Quest, character: Character) -> Optional[CoreError]:
    if quest.status != QuestStatus.APPROVED:
        return invalid_transition(
            f"reward requires an approved quest, got {quest.status.value}"
        )
    if quest.assigned_character_id != character.character_id:
        return unauthorized(
            f"quest {quest.quest_id} is not assigned to character {character.character_id}"
        )
    return validate_reward(quest.base_reward)


def apply_reward(
    quest: Quest, character: Character
) -> tuple[Optional[LedgerEntry], Optional[CoreError]]:
    """Credit the quest's reward to a copy of ``character``.

    The input character is left untouched; the caller persists the returned
    copy together with the quest's APPROVED status in one transaction.
    """
    error = _check_ledger(quest, character)
    if error is not None:
        return None, error

    resolved = resolve_reward(
        quest.base_reward,
        character.active_effects,
        quest.quest_type,
        quest.difficulty,
    )

    updated = replace(character, active_effects=list(character.active_effects))
    updated.experience += resolved.exp
    updated.bronze += resolved.bronze
    updated.silver += resolved.silver
    updated.gold += resolved.gold
    updated.completed_quests += 1
    updated.total_gold_earned += resolved.gold

    start_level = updated.level
    apply_level_ups(updated)

    return LedgerEntry(
        character=updated,
        reward=resolved,
        levels_gained=updated.level - start_level,
    ), None


def approve_and_reward(
    quest: Quest,
    character: Character,
    caller_role: MemberRole,
    now: Optional[datetime] = None,
) -> tuple[Optional[ApprovalResult], Optional[CoreError]]:
    """COMPLETED -> APPROVED plus reward, all-or-nothing.

    The transition runs on a staged copy; ``quest`` is only written once the
    ledger has accepted the staged result.
    """
    error = check_approve(quest, caller_role)
    if error is not None:
        return None, error

    staged = replace(quest)
    approve(staged, caller_role, now)

    entry, error = apply_reward(staged, character)
    if error is not None:
        return None, error

    quest.status = staged.status
    quest.approved_at = staged.approved_at

    logger.info(
        "Quest %s approved for %s: %s",
        quest.quest_id,
        character.character_id,
        entry.reward.as_reward().as_dict(),
    )
    return ApprovalResult(
        quest=quest,
        character=entry.character,
        applied_reward=entry.reward,
        levels_gained=entry.levels_gained,
    ), None
