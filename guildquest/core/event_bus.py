"""EventBus - in-process event delivery between services

Services publish domain events after their transaction commits; subscribers
(the activity log) consume them. Delivery is fire-and-forget from the
publisher's point of view: a failing handler is logged and skipped.

Rules:
- events carry ids and small metadata only, never ORM objects
- propagation depth is capped at MAX_DEPTH
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from guildquest.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # handler -> emit -> handler ... nesting limit


@dataclass
class GameEvent:
    """Event data container

    Args:
        event_type: one of EventTypes (e.g. "quest_approved")
        data: ids and small values only
        source: publishing service name
    """

    event_type: str
    data: Dict[str, Any]
    source: str
    guild_id: Optional[str] = None
    character_id: Optional[str] = None
    description: str = ""

    # set by the bus
    _depth: int = field(default=0, repr=False)


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """Synchronous event bus

    Usage:
        bus = EventBus()
        bus.subscribe(EventTypes.QUEST_APPROVED, activity.record)
        bus.emit(GameEvent(event_type=EventTypes.QUEST_APPROVED, data={...}, source="quest_service"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug(f"EventBus subscribe: {event_type} -> {handler.__qualname__}")

    def subscribe_many(self, event_types: List[str], handler: EventHandler) -> None:
        for event_type in event_types:
            self.subscribe(event_type, handler)

    def emit(self, event: GameEvent) -> None:
        """Deliver ``event`` to every subscriber, in subscription order."""
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                f"EventBus depth limit ({MAX_DEPTH}) reached: "
                f"{event.source}:{event.event_type} dropped"
            )
            return

        event._depth = self._current_depth

        handlers = list(self._handlers.get(event.event_type, []))
        if not handlers:
            logger.debug(f"EventBus: no subscribers for {event.event_type}")
            return

        logger.debug(
            f"EventBus dispatch: {event.event_type} (source={event.source}, "
            f"depth={self._current_depth}, handlers={len(handlers)})"
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        f"EventBus handler error: {handler.__qualname__} "
                        f"(event={event.event_type})"
                    )
        finally:
            self._current_depth -= 1

