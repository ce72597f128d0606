"""Effect modifier resolver — composes active effects into one reward delta.

Pure Python, no external dependencies.
"""

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from numbers import Integral, Real
from typing import Iterable, Optional

from guildquest.core.errors import CoreError, ErrorKind
from guildquest.core.quest.enums import QuestType
from guildquest.core.quest.models import Reward

from .models import Effect, EffectBonuses, EffectMultipliers, stacking_order

logger = logging.getLogger(__name__)

_ONE = Decimal(1)


@dataclass(frozen=True)
class ResolvedReward:
    """Reward after effects, plus the factors that produced it."""

    exp: int
    bronze: int
    silver: int
    gold: int
    xp_factor: Decimal = _ONE
    coin_factor: Decimal = _ONE
    bonus_gold: int = 0

    @property
    def has_modifiers(self) -> bool:
        return (
            self.xp_factor != _ONE or self.coin_factor != _ONE or self.bonus_gold != 0
        )

    def as_reward(self) -> Reward:
        return Reward(
            exp=self.exp, bronze=self.bronze, silver=self.silver, gold=self.gold
        )


def round_half_up(value: Decimal) -> int:
    """0.5 always rounds away from zero (37.5 -> 38), unlike round()."""
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def _as_decimal(value: float) -> Decimal:
    # str() keeps the literal the user typed: 0.7 stays 0.7, not 0.69999...
    return Decimal(str(value))


def resolve_reward(
    base_reward: Reward,
    active_effects: Iterable[Effect],
    quest_type: QuestType,
    difficulty: int,
) -> ResolvedReward:
    """Apply every active effect to the base reward.

    The quest is assumed eligible: blocked types and difficulties are
    rejected at accept time (see ``find_quest_block``). ``quest_type`` and
    ``difficulty`` are part of the signature so scoped effects can use them.

    - xp factor: product of xp_multiplier, 1 when none
    - coin factor: product of coin_multiplier, 1 when none
    - bonus gold: sum of bonus_gold, added after rounding gold
    - each field is rounded on its own and clamped at 0
    """
    xp_factor = _ONE
    coin_factor = _ONE
    bonus_gold = 0

    for effect in stacking_order(list(active_effects)):
        m = effect.multipliers
        if m.xp_multiplier is not None:
            xp_factor *= _as_decimal(m.xp_multiplier)
        if m.coin_multiplier is not None:
            coin_factor *= _as_decimal(m.coin_multiplier)
        if effect.bonuses.bonus_gold is not None:
            bonus_gold += effect.bonuses.bonus_gold

    exp = round_half_up(base_reward.exp * xp_factor)
    bronze = round_half_up(base_reward.bronze * coin_factor)
    silver = round_half_up(base_reward.silver * coin_factor)
    gold = round_half_up(base_reward.gold * coin_factor) + bonus_gold

    resolved = ResolvedReward(
        exp=max(0, exp),
        bronze=max(0, bronze),
        silver=max(0, silver),
        gold=max(0, gold),
        xp_factor=xp_factor,
        coin_factor=coin_factor,
        bonus_gold=bonus_gold,
    )
    if resolved.has_modifiers:
        logger.debug(
            "Reward resolved for %s/d%d: %s -> %s",
            quest_type.value,
            difficulty,
            base_reward.as_dict(),
            resolved.as_reward().as_dict(),
        )
    return resolved


# === validation ===


def validate_reward(reward: Reward) -> Optional[CoreError]:
    """Every component must be a non-negative integer."""
    for name, value in reward.as_dict().items():
        if isinstance(value, bool) or not isinstance(value, Integral):
            return CoreError(
                ErrorKind.INVALID_REWARD_VALUE, f"{name} must be an integer"
            )
        if value < 0:
            return CoreError(
                ErrorKind.INVALID_REWARD_VALUE, f"{name} must not be negative"
            )
    return None


def _positive_finite(value: object) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


def validate_effect_payload(
    multipliers: EffectMultipliers, bonuses: EffectBonuses
) -> Optional[CoreError]:
    """Multipliers must be finite and > 0; bonus_chance must lie in [0, 1]."""
    for name in ("xp_multiplier", "coin_multiplier"):
        value = getattr(multipliers, name)
        if value is not None and not _positive_finite(value):
            return CoreError(
                ErrorKind.INVALID_REWARD_VALUE, f"{name} must be a positive number"
            )

    if bonuses.bonus_gold is not None and (
        isinstance(bonuses.bonus_gold, bool)
        or not isinstance(bonuses.bonus_gold, Integral)
    ):
        return CoreError(ErrorKind.INVALID_REWARD_VALUE, "bonus_gold must be an integer")

    chance = bonuses.bonus_chance
    if chance is not None:
        if not isinstance(chance, Real) or not math.isfinite(chance):
            return CoreError(
                ErrorKind.INVALID_REWARD_VALUE, "bonus_chance must be a number"
            )
        if not 0 <= chance <= 1:
            return CoreError(
                ErrorKind.INVALID_REWARD_VALUE, "bonus_chance must be within [0, 1]"
            )
    return None
