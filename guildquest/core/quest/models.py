"""Quest domain models (DB independent)"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import ASSIGNED_STATUSES, QuestStatus, QuestType


@dataclass(frozen=True)
class Reward:
    """Experience plus the bronze/silver/gold currency triple."""

    exp: int = 0
    bronze: int = 0
    silver: int = 0
    gold: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "exp": self.exp,
            "bronze": self.bronze,
            "silver": self.silver,
            "gold": self.gold,
        }


@dataclass
class Quest:
    """A household task with a lifecycle and a base reward."""

    quest_id: str
    guild_id: str = ""
    title: str = ""
    description: str = ""

    quest_type: QuestType = QuestType.DAILY
    difficulty: int = 1  # 1..3
    status: QuestStatus = QuestStatus.AVAILABLE
    base_reward: Reward = Reward()

    assigned_character_id: Optional[str] = None

    # set only by the matching transition
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None

    created_at: Optional[datetime] = None
    version: int = 0

    @property
    def is_assigned(self) -> bool:
        return self.assigned_character_id is not None

    def assignment_consistent(self) -> bool:
        """An assignee exists exactly when the status requires one."""
        return self.is_assigned == (self.status in ASSIGNED_STATUSES)
