"""Effect duration ticker"""

from dataclasses import replace
from typing import Iterable

from .models import Effect


def tick_effects(effects: Iterable[Effect]) -> list[Effect]:
    """One elapsed day. Returns copies with duration - 1, floored at 0.

    The input effects are not modified. Expired effects stay in the list;
    removing them is the caller's business.
    """
    return [replace(e, duration=max(0, e.duration - 1)) for e in effects]


def newly_expired(before: list[Effect], after: list[Effect]) -> list[Effect]:
    """Effects that were active before the tick and are not after it."""
    was_active = {e.effect_id for e in before if e.is_active}
    return [e for e in after if e.effect_id in was_active and not e.is_active]
