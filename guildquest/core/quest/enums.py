"""Quest enums"""

from enum import Enum


class QuestType(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    SPECIAL = "SPECIAL"
    GROUP = "GROUP"
    EDUCATION = "EDUCATION"
    PHYSICAL = "PHYSICAL"
    CREATIVE = "CREATIVE"
    FAMILY = "FAMILY"


class QuestStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    APPROVED = "APPROVED"


class MemberRole(str, Enum):
    GUILDMASTER = "GUILDMASTER"
    PLAYER = "PLAYER"


# statuses in which a quest must have an assignee
ASSIGNED_STATUSES = frozenset(
    {QuestStatus.IN_PROGRESS, QuestStatus.COMPLETED, QuestStatus.APPROVED}
)

DIFFICULTIES = (1, 2, 3)
