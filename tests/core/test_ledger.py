"""Reward ledger tests"""

from dataclasses import replace
from datetime import datetime, timezone

from guildquest.core.character.models import Character
from guildquest.core.effect.models import Effect, EffectBonuses, EffectMultipliers
from guildquest.core.errors import ErrorKind
from guildquest.core.quest.enums import MemberRole, QuestStatus, QuestType
from guildquest.core.quest.models import Quest, Reward
from guildquest.core.reward.ledger import apply_reward, approve_and_reward

NOW = datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)


def _quest(status=QuestStatus.COMPLETED, reward=None) -> Quest:
    return Quest(
        quest_id="q_001",
        guild_id="guild_001",
        title="Clean your room",
        quest_type=QuestType.WEEKLY,
        difficulty=2,
        status=status,
        base_reward=reward or Reward(exp=150, bronze=10, silver=2, gold=1),
        assigned_character_id="char_001",
    )


def _character(**kwargs) -> Character:
    return Character("char_001", guild_id="guild_001", **kwargs)


class TestApplyReward:
    def test_credits_reward_and_counters(self):
        entry, error = apply_reward(_quest(QuestStatus.APPROVED), _character(gold=4))

        assert error is None
        c = entry.character
        assert (c.experience, c.bronze, c.silver, c.gold) == (150, 10, 2, 5)
        assert c.completed_quests == 1
        assert c.total_gold_earned == 1
        assert entry.levels_gained == 0

    def test_input_character_untouched(self):
        character = _character()
        apply_reward(_quest(QuestStatus.APPROVED), character)
        assert character.experience == 0
        assert character.completed_quests == 0

    def test_level_up_after_credit(self):
        entry, _ = apply_reward(
            _quest(QuestStatus.APPROVED), _character(experience=100)
        )
        assert entry.character.level == 2
        assert entry.character.experience == 50
        assert entry.levels_gained == 1

    def test_total_gold_counts_effect_adjusted_gold(self):
        boost = Effect(
            effect_id="effect_001",
            duration=2,
            multipliers=EffectMultipliers(coin_multiplier=2),
            bonuses=EffectBonuses(bonus_gold=3),
        )
        entry, _ = apply_reward(
            _quest(QuestStatus.APPROVED), _character(active_effects=[boost])
        )
        assert entry.reward.gold == 5
        assert entry.character.total_gold_earned == 5

    def test_requires_approved_status(self):
        entry, error = apply_reward(_quest(QuestStatus.COMPLETED), _character())
        assert entry is None
        assert error.kind == ErrorKind.INVALID_TRANSITION

    def test_requires_assignee(self):
        entry, error = apply_reward(
            _quest(QuestStatus.APPROVED), Character("char_999")
        )
        assert entry is None
        assert error.kind == ErrorKind.UNAUTHORIZED


class TestApproveAndReward:
    def test_success(self):
        quest = _quest()
        result, error = approve_and_reward(
            quest, _character(), MemberRole.GUILDMASTER, now=NOW
        )
        assert error is None
        assert quest.status == QuestStatus.APPROVED
        assert quest.approved_at == NOW
        assert result.character.experience == 150
        assert result.applied_reward.bronze == 10

    def test_player_role_rejected(self):
        quest = _quest()
        character = _character(bronze=3)
        result, error = approve_and_reward(quest, character, MemberRole.PLAYER)
        assert result is None
        assert error.kind == ErrorKind.UNAUTHORIZED
        assert quest.status == QuestStatus.COMPLETED
        assert character.bronze == 3

    def test_invalid_reward_leaves_quest_completed(self):
        quest = _quest(reward=Reward(exp=-10))
        before = replace(quest)
        result, error = approve_and_reward(
            quest, _character(), MemberRole.GUILDMASTER, now=NOW
        )
        assert result is None
        assert error.kind == ErrorKind.INVALID_REWARD_VALUE
        assert quest == before
