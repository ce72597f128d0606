"""Effect core package"""

from guildquest.core.effect.models import (
    Effect,
    EffectBonuses,
    EffectMultipliers,
    EffectRestrictions,
    EffectType,
    stacking_order,
)
from guildquest.core.effect.resolver import (
    ResolvedReward,
    resolve_reward,
    round_half_up,
    validate_effect_payload,
    validate_reward,
)
from guildquest.core.effect.ticker import newly_expired, tick_effects

__all__ = [
    # models
    "Effect",
    "EffectType",
    "EffectMultipliers",
    "EffectRestrictions",
    "EffectBonuses",
    "stacking_order",
    # resolver
    "ResolvedReward",
    "resolve_reward",
    "round_half_up",
    "validate_reward",
    "validate_effect_payload",
    # ticker
    "tick_effects",
    "newly_expired",
]
