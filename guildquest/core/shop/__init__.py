"""Shop core package"""

from guildquest.core.shop.gate import can_purchase, check_purchase, is_shop_blocked
from guildquest.core.shop.models import Cost, Denomination, ShopItem

__all__ = [
    "Cost",
    "Denomination",
    "ShopItem",
    "is_shop_blocked",
    "check_purchase",
    "can_purchase",
]
