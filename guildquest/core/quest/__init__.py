"""Quest lifecycle core package"""

from guildquest.core.quest.enums import (
    ASSIGNED_STATUSES,
    DIFFICULTIES,
    MemberRole,
    QuestStatus,
    QuestType,
)
from guildquest.core.quest.models import Quest, Reward

__all__ = [
    # enums
    "QuestType",
    "QuestStatus",
    "MemberRole",
    "ASSIGNED_STATUSES",
    "DIFFICULTIES",
    # models
    "Quest",
    "Reward",
]
