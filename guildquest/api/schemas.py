"""API request/response schemas."""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from guildquest.core.character.models import Character
from guildquest.core.character.progression import exp_to_next_level
from guildquest.core.effect.models import (
    Effect,
    EffectBonuses,
    EffectMultipliers,
    EffectRestrictions,
    EffectType,
    bonuses_to_dict,
    multipliers_to_dict,
    restrictions_to_dict,
)
from guildquest.core.effect.resolver import ResolvedReward
from guildquest.core.quest.enums import MemberRole, QuestStatus, QuestType
from guildquest.core.quest.models import Quest, Reward
from guildquest.core.shop.gate import is_shop_blocked
from guildquest.core.shop.models import Denomination, ShopItem
from guildquest.services.shop_service import PurchaseRecord


# === Shared ===


class RewardInfo(BaseModel):
    """Experience + currency triple"""

    exp: int = Field(0, ge=0)
    bronze: int = Field(0, ge=0)
    silver: int = Field(0, ge=0)
    gold: int = Field(0, ge=0)

    def to_core(self) -> Reward:
        return Reward(exp=self.exp, bronze=self.bronze, silver=self.silver, gold=self.gold)


# === Request Schemas ===


class GuildCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class MemberCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: MemberRole = MemberRole.PLAYER


class QuestCreateRequest(BaseModel):
    guild_id: str
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    quest_type: QuestType
    difficulty: int = Field(1, ge=1, le=3)
    rewards: RewardInfo = Field(default_factory=RewardInfo)


class CharacterActionRequest(BaseModel):
    """accept / complete / abandon"""

    character_id: str


class ApproveRequest(BaseModel):
    member_id: str = Field(..., description="Guild member performing the approval")


class CharacterCreateRequest(BaseModel):
    guild_id: str
    name: str = Field(..., min_length=1, max_length=100)
    member_id: Optional[str] = None


class MultipliersInfo(BaseModel):
    xp_multiplier: Optional[float] = Field(None, gt=0)
    coin_multiplier: Optional[float] = Field(None, gt=0)


class RestrictionsInfo(BaseModel):
    shop_blocked: bool = False
    quest_types_blocked: list[QuestType] = []
    difficult_quests_blocked: bool = False


class BonusesInfo(BaseModel):
    bonus_gold: Optional[int] = None
    extra_quest_slot: Optional[int] = None
    bonus_chance: Optional[float] = Field(None, ge=0, le=1)


class EffectCreateRequest(BaseModel):
    character_id: str
    member_id: str = Field(..., description="Acting guildmaster")
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    effect_type: EffectType
    duration: Optional[int] = Field(None, gt=0, description="Days; default 7")
    multipliers: MultipliersInfo = Field(default_factory=MultipliersInfo)
    restrictions: RestrictionsInfo = Field(default_factory=RestrictionsInfo)
    bonuses: BonusesInfo = Field(default_factory=BonusesInfo)
    reason: Optional[str] = None

    def core_payload(self) -> tuple[EffectMultipliers, EffectRestrictions, EffectBonuses]:
        return (
            EffectMultipliers(**self.multipliers.model_dump()),
            EffectRestrictions(
                shop_blocked=self.restrictions.shop_blocked,
                quest_types_blocked=tuple(self.restrictions.quest_types_blocked),
                difficult_quests_blocked=self.restrictions.difficult_quests_blocked,
            ),
            EffectBonuses(**self.bonuses.model_dump()),
        )


class DurationUpdateRequest(BaseModel):
    member_id: str
    duration: int = Field(..., ge=0)


class TickRequest(BaseModel):
    character_id: Optional[str] = Field(None, description="Omit to tick every character")
    day: Optional[date] = None


class ShopItemCreateRequest(BaseModel):
    guild_id: str
    member_id: str
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    denomination: Denomination
    amount: int = Field(..., gt=0)
    stock: Optional[int] = Field(None, ge=0, description="Omit for unlimited")


class PurchaseRequest(BaseModel):
    character_id: str
    item_id: str
    quantity: int = Field(1, ge=1)


# === Response Schemas ===


class GuildInfo(BaseModel):
    guild_id: str
    name: str


class MemberInfo(BaseModel):
    member_id: str
    guild_id: str
    name: str
    role: MemberRole


class QuestInfo(BaseModel):
    quest_id: str
    guild_id: str
    title: str
    description: str
    quest_type: QuestType
    difficulty: int
    status: QuestStatus
    rewards: RewardInfo
    assigned_character_id: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    version: int

    @classmethod
    def from_core(cls, quest: Quest) -> "QuestInfo":
        return cls(
            quest_id=quest.quest_id,
            guild_id=quest.guild_id,
            title=quest.title,
            description=quest.description,
            quest_type=quest.quest_type,
            difficulty=quest.difficulty,
            status=quest.status,
            rewards=RewardInfo(**quest.base_reward.as_dict()),
            assigned_character_id=quest.assigned_character_id,
            started_at=quest.started_at,
            completed_at=quest.completed_at,
            approved_at=quest.approved_at,
            version=quest.version,
        )


class ResolvedRewardInfo(BaseModel):
    exp: int
    bronze: int
    silver: int
    gold: int
    xp_factor: float
    coin_factor: float
    bonus_gold: int
    has_modifiers: bool

    @classmethod
    def from_core(cls, resolved: ResolvedReward) -> "ResolvedRewardInfo":
        return cls(
            **resolved.as_reward().as_dict(),
            xp_factor=float(resolved.xp_factor),
            coin_factor=float(resolved.coin_factor),
            bonus_gold=resolved.bonus_gold,
            has_modifiers=resolved.has_modifiers,
        )


class EffectInfo(BaseModel):
    effect_id: str
    character_id: str
    name: str
    description: str
    effect_type: EffectType
    duration: int
    max_duration: int
    is_active: bool
    multipliers: dict[str, Any]
    restrictions: dict[str, Any]
    bonuses: dict[str, Any]
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_core(cls, effect: Effect) -> "EffectInfo":
        return cls(
            effect_id=effect.effect_id,
            character_id=effect.character_id,
            name=effect.name,
            description=effect.description,
            effect_type=effect.effect_type,
            duration=effect.duration,
            max_duration=effect.max_duration,
            is_active=effect.is_active,
            multipliers=multipliers_to_dict(effect.multipliers),
            restrictions=restrictions_to_dict(effect.restrictions),
            bonuses=bonuses_to_dict(effect.bonuses),
            reason=effect.reason,
            created_at=effect.created_at,
        )


class CharacterInfo(BaseModel):
    character_id: str
    guild_id: str
    member_id: Optional[str] = None
    name: str
    level: int
    experience: int
    exp_to_next_level: int
    bronze: int
    silver: int
    gold: int
    completed_quests: int
    total_gold_earned: int
    shop_blocked: bool
    active_effects: list[EffectInfo] = []

    @classmethod
    def from_core(cls, character: Character) -> "CharacterInfo":
        return cls(
            character_id=character.character_id,
            guild_id=character.guild_id,
            member_id=character.member_id,
            name=character.name,
            level=character.level,
            experience=character.experience,
            exp_to_next_level=exp_to_next_level(character),
            bronze=character.bronze,
            silver=character.silver,
            gold=character.gold,
            completed_quests=character.completed_quests,
            total_gold_earned=character.total_gold_earned,
            shop_blocked=is_shop_blocked(character.active_effects),
            active_effects=[EffectInfo.from_core(e) for e in character.active_effects],
        )


class ApprovalResponse(BaseModel):
    quest: QuestInfo
    character: CharacterInfo
    applied_reward: ResolvedRewardInfo
    levels_gained: int


class TickResponse(BaseModel):
    ticked: int
    effects: list[EffectInfo] = []


class ShopItemInfo(BaseModel):
    item_id: str
    guild_id: str
    name: str
    description: str
    denomination: Denomination
    amount: int
    stock: Optional[int] = None
    availability: str

    @classmethod
    def from_core(cls, item: ShopItem) -> "ShopItemInfo":
        return cls(
            item_id=item.item_id,
            guild_id=item.guild_id,
            name=item.name,
            description=item.description,
            denomination=item.cost.denomination,
            amount=item.cost.amount,
            stock=item.stock,
            availability="always" if item.unlimited else "limited",
        )


class PurchaseResponse(BaseModel):
    purchase_id: str
    character_id: str
    item_id: str
    quantity: int
    denomination: Denomination
    total_amount: int
    balance_after: int
    stock_after: Optional[int] = None


class PurchaseInfo(BaseModel):
    purchase_id: str
    item_id: str
    item_name: str
    quantity: int
    denomination: Denomination
    total_amount: int
    created_at: datetime

    @classmethod
    def from_core(cls, record: PurchaseRecord) -> "PurchaseInfo":
        return cls(
            purchase_id=record.purchase_id,
            item_id=record.item_id,
            item_name=record.item_name,
            quantity=record.quantity,
            denomination=record.total.denomination,
            total_amount=record.total.amount,
            created_at=record.created_at,
        )


class ActivityInfo(BaseModel):
    log_type: str
    character_id: Optional[str] = None
    description: str
    metadata: dict[str, Any] = {}
    created_at: datetime


class ErrorDetail(BaseModel):
    error: str
    message: str


class ErrorResponse(BaseModel):
    detail: ErrorDetail
