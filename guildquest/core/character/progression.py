"""Level progression"""

import logging

from .models import Character

logger = logging.getLogger(__name__)

EXP_PER_LEVEL = 200


def exp_needed(level: int) -> int:
    """Experience required to leave ``level``. Linear: level * 200."""
    return level * EXP_PER_LEVEL


def apply_level_ups(character: Character) -> Character:
    """Convert banked experience into levels, as many as it pays for.

    Mutates and returns ``character``. Always terminates because
    exp_needed() is strictly positive for level >= 1.
    """
    start_level = character.level
    while character.experience >= exp_needed(character.level):
        character.experience -= exp_needed(character.level)
        character.level += 1

    if character.level != start_level:
        logger.info(
            "Character %s levelled %d -> %d",
            character.character_id,
            start_level,
            character.level,
        )
    return character


def exp_to_next_level(character: Character) -> int:
    return exp_needed(character.level) - character.experience
