"""Event type constants

Every value doubles as an activity log type.
"""


class EventTypes:
    """Event type strings"""

    # === Quest lifecycle ===
    QUEST_CREATED = "quest_created"
    QUEST_ACCEPTED = "quest_accepted"
    QUEST_COMPLETED = "quest_completed"
    QUEST_APPROVED = "quest_approved"
    QUEST_ABANDONED = "quest_abandoned"

    # === Character ===
    LEVEL_UP = "level_up"

    # === Effects ===
    EFFECT_APPLIED = "effect_applied"
    EFFECT_DURATION_CHANGED = "effect_duration_changed"
    EFFECT_EXPIRED = "effect_expired"

    # === Shop ===
    PURCHASE_MADE = "purchase_made"

    @classmethod
    def all(cls) -> list[str]:
        return [
            v for k, v in vars(cls).items() if k.isupper() and isinstance(v, str)
        ]
