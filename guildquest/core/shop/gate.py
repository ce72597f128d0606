"""Shop gate — purchase eligibility"""

from typing import Iterable

from guildquest.core.character.models import Character
from guildquest.core.effect.models import Effect
from guildquest.core.errors import CoreError, ErrorKind

from .models import ShopItem


def is_shop_blocked(active_effects: Iterable[Effect]) -> bool:
    """True iff an active effect carries the shop_blocked restriction."""
    return any(e.is_active and e.restrictions.shop_blocked for e in active_effects)


def check_purchase(
    character: Character,
    item: ShopItem,
    quantity: int = 1,
) -> list[CoreError]:
    """Every reason the purchase is refused. Empty list = allowed.

    The three checks are independent:
    - no active shop-blocking effect
    - enough coins of the item's own denomination (no conversion)
    - enough stock, unless stock is unlimited
    """
    if quantity < 1:
        return [CoreError(ErrorKind.INVALID_QUANTITY, "quantity must be at least 1")]

    errors: list[CoreError] = []

    if is_shop_blocked(character.active_effects):
        errors.append(
            CoreError(ErrorKind.SHOP_BLOCKED, "shop is blocked by an active effect")
        )

    total = item.cost.times(quantity)
    balance = character.balance(total.denomination.value)
    if balance < total.amount:
        errors.append(
            CoreError(
                ErrorKind.INSUFFICIENT_FUNDS,
                f"needs {total.amount} {total.denomination.value}, has {balance}",
            )
        )

    if not item.unlimited and item.stock < quantity:
        errors.append(
            CoreError(
                ErrorKind.OUT_OF_STOCK,
                f"only {item.stock} left of {item.name or item.item_id}",
            )
        )

    return errors


def can_purchase(character: Character, item: ShopItem, quantity: int = 1) -> bool:
    return not check_purchase(character, item, quantity)
