"""Typed error values returned across the core boundary.

Core functions never raise for domain failures. They return a ``CoreError``
(or ``None`` on success) so callers can tell the kinds apart and pick a
user-facing message.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_TRANSITION = "invalid_transition"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    SHOP_BLOCKED = "shop_blocked"
    INVALID_REWARD_VALUE = "invalid_reward_value"
    QUEST_BLOCKED = "quest_blocked"
    OUT_OF_STOCK = "out_of_stock"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_VALUE = "invalid_value"


@dataclass(frozen=True)
class CoreError:
    kind: ErrorKind
    message: str = ""

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}" if self.message else self.kind.value


def invalid_transition(message: str) -> CoreError:
    return CoreError(ErrorKind.INVALID_TRANSITION, message)


def unauthorized(message: str) -> CoreError:
    return CoreError(ErrorKind.UNAUTHORIZED, message)


def not_found(entity: str, entity_id: str) -> CoreError:
    return CoreError(ErrorKind.NOT_FOUND, f"{entity} not found: {entity_id}")


def invalid_value(message: str) -> CoreError:
    return CoreError(ErrorKind.INVALID_VALUE, message)
