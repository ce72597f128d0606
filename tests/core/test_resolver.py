"""Effect modifier resolver tests"""

import math
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from guildquest.core.effect.models import Effect, EffectBonuses, EffectMultipliers
from guildquest.core.effect.resolver import (
    resolve_reward,
    round_half_up,
    validate_effect_payload,
    validate_reward,
)
from guildquest.core.errors import ErrorKind
from guildquest.core.quest.enums import QuestType
from guildquest.core.quest.models import Reward

T0 = datetime(2024, 5, 1, 9, 0)


def _effect(n=1, duration=3, xp=None, coin=None, bonus_gold=None) -> Effect:
    return Effect(
        effect_id=f"effect_{n:03d}",
        duration=duration,
        multipliers=EffectMultipliers(xp_multiplier=xp, coin_multiplier=coin),
        bonuses=EffectBonuses(bonus_gold=bonus_gold),
        created_at=T0 + timedelta(minutes=n),
    )


def _resolve(base: Reward, effects) -> Reward:
    return resolve_reward(base, effects, QuestType.DAILY, 1).as_reward()


class TestResolve:
    def test_identity_without_effects(self):
        base = Reward(exp=50, bronze=10, silver=3, gold=1)
        resolved = resolve_reward(base, [], QuestType.DAILY, 1)
        assert resolved.as_reward() == base
        assert not resolved.has_modifiers

    def test_xp_multiplier(self):
        assert _resolve(Reward(exp=50), [_effect(xp=1.5)]).exp == 75

    def test_half_rounds_up(self):
        assert _resolve(Reward(exp=50), [_effect(xp=0.75)]).exp == 38

    def test_stacked_xp_and_coin(self):
        effects = [_effect(1, xp=1.5), _effect(2, coin=0.8)]
        result = _resolve(Reward(exp=50, bronze=10), effects)
        assert result.exp == 75
        assert result.bronze == 8

    def test_multipliers_multiply(self):
        effects = [_effect(1, xp=2), _effect(2, xp=1.5)]
        resolved = resolve_reward(Reward(exp=10), effects, QuestType.DAILY, 1)
        assert resolved.exp == 30
        assert resolved.xp_factor == Decimal("3.0")

    def test_fields_rounded_independently(self):
        # 5 * 0.7 = 3.5 per field; rounding a combined total would differ
        result = _resolve(Reward(bronze=5, silver=5, gold=5), [_effect(coin=0.7)])
        assert (result.bronze, result.silver, result.gold) == (4, 4, 4)

    def test_bonus_gold_added_after_rounding(self):
        effects = [_effect(1, coin=0.5, bonus_gold=2), _effect(2, bonus_gold=1)]
        result = _resolve(Reward(gold=3), effects)
        assert result.gold == 2 + 3

    def test_negative_bonus_clamped_at_zero(self):
        result = _resolve(Reward(gold=1), [_effect(bonus_gold=-5)])
        assert result.gold == 0

    def test_expired_effects_ignored(self):
        result = _resolve(Reward(exp=50), [_effect(xp=2, duration=0)])
        assert result.exp == 50

    def test_order_of_input_does_not_matter(self):
        a, b = _effect(1, xp=1.1), _effect(2, xp=1.3)
        assert _resolve(Reward(exp=77), [a, b]) == _resolve(Reward(exp=77), [b, a])


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        "value,expected",
        [("37.5", 38), ("37.4999", 37), ("0.5", 1), ("2.5", 3), ("10", 10)],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(Decimal(value)) == expected


class TestValidation:
    def test_valid_reward(self):
        assert validate_reward(Reward(exp=1, bronze=0, silver=2, gold=3)) is None

    def test_negative_component(self):
        error = validate_reward(Reward(bronze=-1))
        assert error.kind == ErrorKind.INVALID_REWARD_VALUE

    def test_non_integer_component(self):
        assert validate_reward(Reward(exp=1.5)).kind == ErrorKind.INVALID_REWARD_VALUE
        assert validate_reward(Reward(gold=True)).kind == ErrorKind.INVALID_REWARD_VALUE

    @pytest.mark.parametrize("value", [0, -1.0, math.inf, math.nan])
    def test_bad_multiplier(self, value):
        error = validate_effect_payload(
            EffectMultipliers(xp_multiplier=value), EffectBonuses()
        )
        assert error.kind == ErrorKind.INVALID_REWARD_VALUE

    def test_bonus_chance_range(self):
        ok = validate_effect_payload(EffectMultipliers(), EffectBonuses(bonus_chance=1))
        bad = validate_effect_payload(
            EffectMultipliers(), EffectBonuses(bonus_chance=1.2)
        )
        assert ok is None
        assert bad.kind == ErrorKind.INVALID_REWARD_VALUE
