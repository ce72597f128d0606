"""ORM <-> Core conversion.

JSON payload columns are decoded into the fixed effect records here so the
core never sees raw dicts.
"""

from guildquest.core.character.models import Character
from guildquest.core.effect.models import (
    Effect,
    EffectType,
    bonuses_from_dict,
    bonuses_to_dict,
    multipliers_from_dict,
    multipliers_to_dict,
    restrictions_from_dict,
    restrictions_to_dict,
)
from guildquest.core.effect.resolver import ResolvedReward
from guildquest.core.quest.enums import QuestStatus, QuestType
from guildquest.core.quest.models import Quest, Reward
from guildquest.core.shop.models import Cost, Denomination, ShopItem
from guildquest.db.models import CharacterModel, EffectModel, QuestModel, ShopItemModel


# === Quest ===


def quest_to_core(orm: QuestModel) -> Quest:
    return Quest(
        quest_id=orm.quest_id,
        guild_id=orm.guild_id,
        title=orm.title,
        description=orm.description,
        quest_type=QuestType(orm.quest_type),
        difficulty=orm.difficulty,
        status=QuestStatus(orm.status),
        base_reward=Reward(
            exp=orm.exp_reward,
            bronze=orm.bronze_reward,
            silver=orm.silver_reward,
            gold=orm.gold_reward,
        ),
        assigned_character_id=orm.character_id,
        started_at=orm.started_at,
        completed_at=orm.completed_at,
        approved_at=orm.approved_at,
        created_at=orm.created_at,
        version=orm.version,
    )


def quest_state_values(core: Quest) -> dict:
    """Columns a transition may change (for conditional UPDATEs)."""
    return {
        "status": core.status.value,
        "character_id": core.assigned_character_id,
        "started_at": core.started_at,
        "completed_at": core.completed_at,
        "approved_at": core.approved_at,
    }


# === Effect ===


def effect_to_core(orm: EffectModel) -> Effect:
    return Effect(
        effect_id=orm.effect_id,
        character_id=orm.character_id,
        name=orm.name,
        description=orm.description,
        reason=orm.reason,
        effect_type=EffectType(orm.effect_type),
        duration=orm.duration,
        max_duration=orm.max_duration,
        multipliers=multipliers_from_dict(orm.multipliers),
        restrictions=restrictions_from_dict(orm.restrictions),
        bonuses=bonuses_from_dict(orm.bonuses),
        created_at=orm.created_at,
    )


def effect_to_orm(core: Effect) -> EffectModel:
    orm = EffectModel(
        effect_id=core.effect_id,
        character_id=core.character_id,
        name=core.name,
        description=core.description,
        reason=core.reason,
        effect_type=core.effect_type.value,
        duration=core.duration,
        max_duration=core.max_duration,
        multipliers=multipliers_to_dict(core.multipliers),
        restrictions=restrictions_to_dict(core.restrictions),
        bonuses=bonuses_to_dict(core.bonuses),
    )
    if core.created_at is not None:
        orm.created_at = core.created_at
    return orm


# === Character ===


def character_to_core(orm: CharacterModel, include_expired: bool = False) -> Character:
    effects = [effect_to_core(e) for e in orm.effects]
    if not include_expired:
        effects = [e for e in effects if e.is_active]
    return Character(
        character_id=orm.character_id,
        guild_id=orm.guild_id,
        member_id=orm.member_id,
        name=orm.name,
        level=orm.level,
        experience=orm.experience,
        bronze=orm.bronze,
        silver=orm.silver,
        gold=orm.gold,
        completed_quests=orm.completed_quests,
        total_gold_earned=orm.total_gold_earned,
        active_effects=effects,
        effects_ticked_on=orm.effects_ticked_on,
    )


def character_credit_values(reward: ResolvedReward) -> dict:
    """Column increments for an approved reward (for relative UPDATEs).

    Balances are added to whatever the row holds at write time, so a purchase
    committed after the character was read is not overwritten.
    """
    return {
        "experience": CharacterModel.experience + reward.exp,
        "bronze": CharacterModel.bronze + reward.bronze,
        "silver": CharacterModel.silver + reward.silver,
        "gold": CharacterModel.gold + reward.gold,
        "completed_quests": CharacterModel.completed_quests + 1,
        "total_gold_earned": CharacterModel.total_gold_earned + reward.gold,
    }


# === Shop ===


def shop_item_to_core(orm: ShopItemModel) -> ShopItem:
    return ShopItem(
        item_id=orm.item_id,
        guild_id=orm.guild_id,
        name=orm.name,
        description=orm.description,
        cost=Cost(Denomination(orm.denomination), orm.amount),
        stock=orm.stock,
        is_active=orm.is_active,
    )
