"""Character domain model (DB independent)"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from guildquest.core.effect.models import Effect

DENOMINATIONS = ("bronze", "silver", "gold")


@dataclass
class Character:
    """A player's persistent game entity."""

    character_id: str
    guild_id: str = ""
    member_id: Optional[str] = None
    name: str = ""

    level: int = 1
    experience: int = 0

    bronze: int = 0
    silver: int = 0
    gold: int = 0

    # monotonic counters
    completed_quests: int = 0
    total_gold_earned: int = 0

    active_effects: list[Effect] = field(default_factory=list)
    effects_ticked_on: Optional[date] = None

    def balance(self, denomination: str) -> int:
        if denomination not in DENOMINATIONS:
            raise ValueError(f"Unknown denomination: {denomination}")
        return getattr(self, denomination)
