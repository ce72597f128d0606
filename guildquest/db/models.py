"""SQLAlchemy declarative base and ORM models."""

from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import JSON


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""


# ── no dependencies ──────────────────────────────────────


class GuildModel(Base):
    """ORM model for guilds (households)."""

    __tablename__ = "guilds"

    guild_id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


# ── guild dependent ──────────────────────────────────────


class MemberModel(Base):
    """A user of a guild and the role they hold in it."""

    __tablename__ = "members"

    member_id: Mapped[str] = mapped_column(String, primary_key=True)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False, default="")
    role: Mapped[str] = mapped_column(String, nullable=False, default="PLAYER")


class CharacterModel(Base):
    """ORM model for player characters."""

    __tablename__ = "characters"

    character_id: Mapped[str] = mapped_column(String, primary_key=True)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id", ondelete="CASCADE"), nullable=False
    )
    member_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("members.member_id"), nullable=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False, default="")

    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    bronze: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    silver: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    completed_quests: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_gold_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    effects_ticked_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    effects: Mapped[list["EffectModel"]] = relationship(
        "EffectModel",
        back_populates="character",
        cascade="all, delete-orphan",
        order_by="EffectModel.created_at",
    )


class ShopItemModel(Base):
    """Purchasable reward offered by a guild."""

    __tablename__ = "shop_items"

    item_id: Mapped[str] = mapped_column(String, primary_key=True)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    denomination: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    stock: Mapped[int | None] = mapped_column(Integer, nullable=True)  # NULL = unlimited
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)


# ── character dependent ──────────────────────────────────


class QuestModel(Base):
    """ORM model for quests."""

    __tablename__ = "quests"

    quest_id: Mapped[str] = mapped_column(String, primary_key=True)
    guild_id: Mapped[str] = mapped_column(
        String, ForeignKey("guilds.guild_id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    quest_type: Mapped[str] = mapped_column(String, nullable=False)
    difficulty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[str] = mapped_column(String, nullable=False, default="AVAILABLE")

    exp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bronze_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    silver_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gold_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    character_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("characters.character_id"), nullable=True
    )

    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    # bumped by every persisted transition (optimistic concurrency)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_quest_guild_status", "guild_id", "status"),
        Index("idx_quest_character", "character_id"),
    )


class EffectModel(Base):
    """Timed modifier attached to a character."""

    __tablename__ = "effects"

    effect_id: Mapped[str] = mapped_column(String, primary_key=True)
    character_id: Mapped[str] = mapped_column(
        String, ForeignKey("characters.character_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    effect_type: Mapped[str] = mapped_column(String, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    max_duration: Mapped[int] = mapped_column(Integer, nullable=False)

    multipliers: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    restrictions: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    bonuses: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    character: Mapped["CharacterModel"] = relationship(
        "CharacterModel", back_populates="effects"
    )

    __table_args__ = (Index("idx_effect_character", "character_id", "duration"),)


class PurchaseModel(Base):
    """A completed shop purchase."""

    __tablename__ = "purchases"

    purchase_id: Mapped[str] = mapped_column(String, primary_key=True)
    character_id: Mapped[str] = mapped_column(
        String, ForeignKey("characters.character_id", ondelete="CASCADE"), nullable=False
    )
    item_id: Mapped[str] = mapped_column(
        String, ForeignKey("shop_items.item_id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    denomination: Mapped[str] = mapped_column(String, nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    item: Mapped["ShopItemModel"] = relationship("ShopItemModel")

    __table_args__ = (Index("idx_purchase_character", "character_id", "created_at"),)


class ActivityLogModel(Base):
    """Audit trail written from EventBus events."""

    __tablename__ = "activity_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    guild_id: Mapped[str | None] = mapped_column(String, nullable=True)
    character_id: Mapped[str | None] = mapped_column(String, nullable=True)
    log_type: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # "metadata" is reserved on declarative classes
    details: Mapped[dict] = mapped_column("metadata", JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    __table_args__ = (Index("idx_activity_guild", "guild_id", "created_at"),)
