"""Shop Service — guild reward shop and purchases"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from guildquest.core.errors import CoreError, ErrorKind, invalid_value, not_found
from guildquest.core.event_bus import EventBus, GameEvent
from guildquest.core.event_types import EventTypes
from guildquest.core.shop.gate import check_purchase
from guildquest.core.shop.models import Cost, Denomination, ShopItem
from guildquest.db.mappers import character_to_core, shop_item_to_core
from guildquest.db.models import CharacterModel, GuildModel, PurchaseModel, ShopItemModel
from guildquest.services.result import ServiceResult

logger = logging.getLogger(__name__)

SOURCE = "shop_service"


@dataclass(frozen=True)
class PurchaseReceipt:
    purchase_id: str
    character_id: str
    item_id: str
    quantity: int
    total: Cost
    balance_after: int
    stock_after: Optional[int]


@dataclass(frozen=True)
class PurchaseRecord:
    purchase_id: str
    item_id: str
    item_name: str
    quantity: int
    total: Cost
    created_at: datetime


class ShopService:
    """Shop items + purchase transaction"""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus

    def create_item(
        self,
        guild_id: str,
        name: str,
        cost: Cost,
        stock: Optional[int] = None,
        description: str = "",
    ) -> ServiceResult[ShopItem]:
        if self._db.get(GuildModel, guild_id) is None:
            return ServiceResult.failure(not_found("Guild", guild_id))
        if cost.amount <= 0:
            return ServiceResult.failure(
                CoreError(ErrorKind.INVALID_REWARD_VALUE, "cost must be positive")
            )
        if stock is not None and stock < 0:
            return ServiceResult.failure(invalid_value("stock must not be negative"))

        orm = ShopItemModel(
            item_id=f"item_{uuid.uuid4().hex[:12]}",
            guild_id=guild_id,
            name=name,
            description=description,
            denomination=cost.denomination.value,
            amount=cost.amount,
            stock=stock,
            is_active=True,
        )
        self._db.add(orm)
        self._commit()
        return ServiceResult.success(shop_item_to_core(orm))

    def list_items(self, guild_id: str) -> list[ShopItem]:
        stmt = (
            select(ShopItemModel)
            .where(ShopItemModel.guild_id == guild_id, ShopItemModel.is_active.is_(True))
            .order_by(ShopItemModel.denomination, ShopItemModel.amount, ShopItemModel.name)
        )
        return [shop_item_to_core(o) for o in self._db.scalars(stmt)]

    def list_purchases(self, character_id: str) -> list[PurchaseRecord]:
        """Purchase history, newest first."""
        stmt = (
            select(PurchaseModel)
            .where(PurchaseModel.character_id == character_id)
            .order_by(PurchaseModel.created_at.desc())
        )
        return [
            PurchaseRecord(
                purchase_id=o.purchase_id,
                item_id=o.item_id,
                item_name=o.item.name,
                quantity=o.quantity,
                total=Cost(Denomination(o.denomination), o.total_amount),
                created_at=o.created_at,
            )
            for o in self._db.scalars(stmt)
        ]

    def purchase(
        self, character_id: str, item_id: str, quantity: int = 1
    ) -> ServiceResult[PurchaseReceipt]:
        """Deduct coins, decrement stock and record the purchase atomically."""
        character_orm = self._db.get(CharacterModel, character_id)
        if character_orm is None:
            return ServiceResult.failure(not_found("Character", character_id))

        item_orm = self._db.get(ShopItemModel, item_id)
        if item_orm is None or not item_orm.is_active:
            return ServiceResult.failure(not_found("Shop item", item_id))
        if item_orm.guild_id != character_orm.guild_id:
            return ServiceResult.failure(not_found("Shop item", item_id))

        item = shop_item_to_core(item_orm)
        errors = check_purchase(character_to_core(character_orm), item, quantity)
        if errors:
            logger.info(
                "Purchase refused (%s -> %s): %s",
                character_id,
                item_id,
                ", ".join(e.kind.value for e in errors),
            )
            return ServiceResult.failure(errors[0])

        total = item.cost.times(quantity)
        try:
            if not self._debit(character_id, total):
                self._db.rollback()
                return ServiceResult.failure(
                    CoreError(ErrorKind.INSUFFICIENT_FUNDS, "balance changed")
                )
            if not item.unlimited and not self._take_stock(item_id, quantity):
                self._db.rollback()
                return ServiceResult.failure(
                    CoreError(ErrorKind.OUT_OF_STOCK, "stock changed")
                )

            purchase_id = f"purchase_{uuid.uuid4().hex[:12]}"
            self._db.add(
                PurchaseModel(
                    purchase_id=purchase_id,
                    character_id=character_id,
                    item_id=item_id,
                    quantity=quantity,
                    denomination=total.denomination.value,
                    total_amount=total.amount,
                )
            )
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            logger.exception("Purchase failed, rolled back: %s", item_id)
            raise

        self._db.refresh(character_orm)
        self._db.refresh(item_orm)
        receipt = PurchaseReceipt(
            purchase_id=purchase_id,
            character_id=character_id,
            item_id=item_id,
            quantity=quantity,
            total=total,
            balance_after=getattr(character_orm, total.denomination.value),
            stock_after=item_orm.stock,
        )
        logger.info(
            "Purchase %s: %s x%d for %d %s",
            purchase_id,
            item.name,
            quantity,
            total.amount,
            total.denomination.value,
        )
        self._bus.emit(
            GameEvent(
                event_type=EventTypes.PURCHASE_MADE,
                data={
                    "purchase_id": purchase_id,
                    "item_id": item_id,
                    "quantity": quantity,
                    "cost": {total.denomination.value: total.amount},
                },
                source=SOURCE,
                guild_id=character_orm.guild_id,
                character_id=character_id,
                description=f'Bought "{item.name}"',
            )
        )
        return ServiceResult.success(receipt)

    # === internals ===

    def _debit(self, character_id: str, total: Cost) -> bool:
        column = getattr(CharacterModel, total.denomination.value)
        stmt = (
            update(CharacterModel)
            .where(CharacterModel.character_id == character_id, column >= total.amount)
            .values({column: column - total.amount})
            .execution_options(synchronize_session=False)
        )
        return self._db.execute(stmt).rowcount == 1

    def _take_stock(self, item_id: str, quantity: int) -> bool:
        stmt = (
            update(ShopItemModel)
            .where(ShopItemModel.item_id == item_id, ShopItemModel.stock >= quantity)
            .values(stock=ShopItemModel.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return self._db.execute(stmt).rowcount == 1

    def _commit(self) -> None:
        try:
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            logger.exception("Commit failed, rolled back")
            raise
