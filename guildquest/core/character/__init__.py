"""Character core package"""

from guildquest.core.character.models import DENOMINATIONS, Character
from guildquest.core.character.progression import (
    EXP_PER_LEVEL,
    apply_level_ups,
    exp_needed,
    exp_to_next_level,
)

__all__ = [
    "Character",
    "DENOMINATIONS",
    "EXP_PER_LEVEL",
    "exp_needed",
    "apply_level_ups",
    "exp_to_next_level",
]
