"""Effect domain models (DB independent)

Payloads are fixed records instead of free-form dicts. When several effects
are active they combine as follows:

- multipliers: product
- bonuses: sum
- restrictions: logical OR
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from guildquest.core.quest.enums import QuestType


class EffectType(str, Enum):
    BLESSING = "BLESSING"
    CURSE = "CURSE"
    BUFF = "BUFF"
    DEBUFF = "DEBUFF"
    DISEASE = "DISEASE"


@dataclass(frozen=True)
class EffectMultipliers:
    xp_multiplier: Optional[float] = None
    coin_multiplier: Optional[float] = None


@dataclass(frozen=True)
class EffectRestrictions:
    shop_blocked: bool = False
    quest_types_blocked: tuple[QuestType, ...] = ()
    difficult_quests_blocked: bool = False


@dataclass(frozen=True)
class EffectBonuses:
    bonus_gold: Optional[int] = None
    extra_quest_slot: Optional[int] = None
    bonus_chance: Optional[float] = None  # 0.0 ~ 1.0


@dataclass
class Effect:
    """A timed modifier on a character."""

    effect_id: str
    character_id: str = ""
    name: str = ""
    description: str = ""
    reason: Optional[str] = None

    effect_type: EffectType = EffectType.BUFF
    duration: int = 0  # days remaining
    max_duration: int = 1  # display only

    multipliers: EffectMultipliers = field(default_factory=EffectMultipliers)
    restrictions: EffectRestrictions = field(default_factory=EffectRestrictions)
    bonuses: EffectBonuses = field(default_factory=EffectBonuses)

    created_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.duration > 0


def stacking_order(effects: list[Effect]) -> list[Effect]:
    """Active effects in acquisition order (created_at ascending, stable)."""
    active = [e for e in effects if e.is_active]
    return sorted(active, key=lambda e: (e.created_at is None, e.created_at or 0))


# === payload <-> dict (JSON columns, API bodies) ===


def multipliers_from_dict(data: Optional[dict[str, Any]]) -> EffectMultipliers:
    data = data or {}
    return EffectMultipliers(
        xp_multiplier=data.get("xp_multiplier"),
        coin_multiplier=data.get("coin_multiplier"),
    )


def restrictions_from_dict(data: Optional[dict[str, Any]]) -> EffectRestrictions:
    data = data or {}
    return EffectRestrictions(
        shop_blocked=bool(data.get("shop_blocked", False)),
        quest_types_blocked=tuple(
            QuestType(t) for t in data.get("quest_types_blocked", [])
        ),
        difficult_quests_blocked=bool(data.get("difficult_quests_blocked", False)),
    )


def bonuses_from_dict(data: Optional[dict[str, Any]]) -> EffectBonuses:
    data = data or {}
    return EffectBonuses(
        bonus_gold=data.get("bonus_gold"),
        extra_quest_slot=data.get("extra_quest_slot"),
        bonus_chance=data.get("bonus_chance"),
    )


def multipliers_to_dict(m: EffectMultipliers) -> dict[str, Any]:
    return {k: v for k, v in vars(m).items() if v is not None}


def restrictions_to_dict(r: EffectRestrictions) -> dict[str, Any]:
    return {
        "shop_blocked": r.shop_blocked,
        "quest_types_blocked": [t.value for t in r.quest_types_blocked],
        "difficult_quests_blocked": r.difficult_quests_blocked,
    }


def bonuses_to_dict(b: EffectBonuses) -> dict[str, Any]:
    return {k: v for k, v in vars(b).items() if v is not None}
