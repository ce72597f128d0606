"""Shop domain models (DB independent)"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Denomination(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"


@dataclass(frozen=True)
class Cost:
    denomination: Denomination
    amount: int

    def times(self, quantity: int) -> "Cost":
        return Cost(self.denomination, self.amount * quantity)


@dataclass
class ShopItem:
    item_id: str
    guild_id: str = ""
    name: str = ""
    description: str = ""
    cost: Cost = Cost(Denomination.BRONZE, 1)
    stock: Optional[int] = None  # None = unlimited
    is_active: bool = True

    @property
    def unlimited(self) -> bool:
        return self.stock is None
