"""QuestService tests"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from guildquest.core.effect.models import (
    EffectMultipliers,
    EffectRestrictions,
    EffectType,
)
from guildquest.core.errors import ErrorKind
from guildquest.core.event_bus import EventBus
from guildquest.core.event_types import EventTypes
from guildquest.core.quest.enums import MemberRole, QuestStatus, QuestType
from guildquest.core.quest.models import Reward
from guildquest.core.reward.ledger import approve_and_reward
from guildquest.core.shop.models import Cost, Denomination
from guildquest.db.models import (
    Base,
    CharacterModel,
    GuildModel,
    QuestModel,
)
from guildquest.services.effect_service import EffectService
from guildquest.services.quest_service import QuestService
from guildquest.services.shop_service import ShopService


@pytest.fixture()
def quest_setup(db_session, bus, household):
    service = QuestService(db_session, bus)
    events = []
    bus.subscribe_many(EventTypes.all(), lambda e: events.append(e))
    return service, db_session, events


def _create(service, guild_id="guild_001", **kwargs):
    result = service.create_quest(
        guild_id=guild_id,
        title=kwargs.pop("title", "Take out the trash"),
        quest_type=kwargs.pop("quest_type", QuestType.DAILY),
        difficulty=kwargs.pop("difficulty", 1),
        reward=kwargs.pop("reward", Reward(exp=50, bronze=10)),
    )
    assert result.ok, result.error
    return result.value


def _completed(service, character_id="char_001", **kwargs):
    quest = _create(service, **kwargs)
    assert service.accept_quest(quest.quest_id, character_id).ok
    assert service.complete_quest(quest.quest_id, character_id).ok
    return quest


class TestCreateQuest:
    def test_create(self, quest_setup):
        service, db, events = quest_setup
        quest = _create(service)

        assert quest.quest_id.startswith("quest_")
        assert quest.status == QuestStatus.AVAILABLE
        assert quest.version == 0
        assert events[-1].event_type == EventTypes.QUEST_CREATED

    def test_unknown_guild(self, quest_setup):
        service, db, events = quest_setup
        result = service.create_quest(
            "guild_999", "x", QuestType.DAILY, 1, Reward(exp=1)
        )
        assert result.error.kind == ErrorKind.NOT_FOUND

    def test_negative_reward_rejected_before_write(self, quest_setup):
        service, db, events = quest_setup
        result = service.create_quest(
            "guild_001", "x", QuestType.DAILY, 1, Reward(exp=-1)
        )
        assert result.error.kind == ErrorKind.INVALID_REWARD_VALUE
        assert db.query(QuestModel).count() == 0

    def test_bad_difficulty(self, quest_setup):
        service, db, events = quest_setup
        result = service.create_quest("guild_001", "x", QuestType.DAILY, 4, Reward())
        assert result.error.kind == ErrorKind.INVALID_VALUE
        assert db.query(QuestModel).count() == 0

    def test_list_by_status(self, quest_setup):
        service, db, events = quest_setup
        a = _create(service, title="a")
        _create(service, title="b")
        service.accept_quest(a.quest_id, "char_001")

        available = service.list_quests("guild_001", QuestStatus.AVAILABLE)
        in_progress = service.list_quests("guild_001", QuestStatus.IN_PROGRESS)
        assert [q.title for q in available] == ["b"]
        assert [q.quest_id for q in in_progress] == [a.quest_id]
        assert len(service.list_quests("guild_001")) == 2


class TestLifecycle:
    def test_accept_complete_approve(self, quest_setup):
        service, db, events = quest_setup
        quest = _completed(service, reward=Reward(exp=250, bronze=10, gold=2))

        result = service.approve_quest(quest.quest_id, MemberRole.GUILDMASTER)

        assert result.ok
        approval = result.value
        assert approval.quest.status == QuestStatus.APPROVED
        assert approval.quest.version == 3
        assert approval.character.level == 2
        assert approval.character.experience == 50
        assert approval.levels_gained == 1

        db.expire_all()
        row = db.get(CharacterModel, "char_001")
        assert (row.level, row.experience, row.bronze, row.gold) == (2, 50, 10, 2)
        assert row.completed_quests == 1
        assert row.total_gold_earned == 2
        assert db.get(QuestModel, quest.quest_id).status == "APPROVED"

        types = [e.event_type for e in events]
        assert types[-2:] == [EventTypes.QUEST_APPROVED, EventTypes.LEVEL_UP]
        assert events[-2].data["rewards"]["bronze"] == 10

    def test_accept_twice(self, quest_setup):
        service, db, events = quest_setup
        quest = _create(service)
        assert service.accept_quest(quest.quest_id, "char_001").ok

        result = service.accept_quest(quest.quest_id, "char_001")
        assert result.error.kind == ErrorKind.INVALID_TRANSITION

    def test_abandon(self, quest_setup):
        service, db, events = quest_setup
        quest = _create(service)
        service.accept_quest(quest.quest_id, "char_001")

        result = service.abandon_quest(quest.quest_id, "char_001")

        assert result.ok
        row = db.get(QuestModel, quest.quest_id)
        db.refresh(row)
        assert row.status == "AVAILABLE"
        assert row.character_id is None
        assert row.started_at is None

    def test_complete_by_other_character(self, quest_setup):
        service, db, events = quest_setup
        db.add(CharacterModel(character_id="char_002", guild_id="guild_001", name="Sib"))
        db.commit()
        quest = _create(service)
        service.accept_quest(quest.quest_id, "char_001")

        result = service.complete_quest(quest.quest_id, "char_002")
        assert result.error.kind == ErrorKind.UNAUTHORIZED

    def test_character_from_other_guild(self, quest_setup):
        service, db, events = quest_setup
        db.add(GuildModel(guild_id="guild_002", name="Neighbours"))
        db.flush()
        db.add(CharacterModel(character_id="char_x", guild_id="guild_002", name="X"))
        db.commit()
        quest = _create(service)

        result = service.accept_quest(quest.quest_id, "char_x")
        assert result.error.kind == ErrorKind.UNAUTHORIZED

    def test_missing_entities(self, quest_setup):
        service, db, events = quest_setup
        quest = _create(service)
        assert service.accept_quest("nope", "char_001").error.kind == ErrorKind.NOT_FOUND
        assert service.accept_quest(quest.quest_id, "nope").error.kind == ErrorKind.NOT_FOUND
        assert (
            service.approve_quest("nope", MemberRole.GUILDMASTER).error.kind
            == ErrorKind.NOT_FOUND
        )


class TestApproveAuthorization:
    def test_player_cannot_approve(self, quest_setup):
        service, db, events = quest_setup
        quest = _completed(service)

        result = service.approve_quest(quest.quest_id, MemberRole.PLAYER)

        assert result.error.kind == ErrorKind.UNAUTHORIZED
        db.expire_all()
        row = db.get(CharacterModel, "char_001")
        assert (row.experience, row.bronze, row.silver, row.gold) == (0, 0, 0, 0)
        assert db.get(QuestModel, quest.quest_id).status == "COMPLETED"

    def test_approve_before_completion(self, quest_setup):
        service, db, events = quest_setup
        quest = _create(service)
        service.accept_quest(quest.quest_id, "char_001")

        result = service.approve_quest(quest.quest_id, MemberRole.GUILDMASTER)
        assert result.error.kind == ErrorKind.INVALID_TRANSITION

    def test_second_approve_rejected(self, quest_setup):
        service, db, events = quest_setup
        quest = _completed(service)
        assert service.approve_quest(quest.quest_id, MemberRole.GUILDMASTER).ok

        result = service.approve_quest(quest.quest_id, MemberRole.GUILDMASTER)
        assert result.error.kind == ErrorKind.INVALID_TRANSITION
        db.expire_all()
        assert db.get(CharacterModel, "char_001").completed_quests == 1


class TestEffectsOnQuests:
    def test_preview_and_approve_with_buff(self, quest_setup, bus):
        service, db, events = quest_setup
        effects = EffectService(db, bus)
        effects.apply_effect(
            "char_001",
            "Study streak",
            EffectType.BLESSING,
            multipliers=EffectMultipliers(xp_multiplier=1.5, coin_multiplier=0.8),
        )
        quest = _create(service, reward=Reward(exp=50, bronze=10))

        preview = service.preview_reward(quest.quest_id, "char_001")
        assert preview.ok
        assert (preview.value.exp, preview.value.bronze) == (75, 8)

        service.accept_quest(quest.quest_id, "char_001")
        service.complete_quest(quest.quest_id, "char_001")
        result = service.approve_quest(quest.quest_id, MemberRole.GUILDMASTER)
        assert result.value.applied_reward.exp == 75
        assert result.value.character.bronze == 8

    def test_blocked_quest_type_cannot_be_accepted(self, quest_setup, bus):
        service, db, events = quest_setup
        EffectService(db, bus).apply_effect(
            "char_001",
            "Screen ban",
            EffectType.CURSE,
            restrictions=EffectRestrictions(quest_types_blocked=(QuestType.CREATIVE,)),
        )
        quest = _create(service, quest_type=QuestType.CREATIVE)

        result = service.accept_quest(quest.quest_id, "char_001")
        assert result.error.kind == ErrorKind.QUEST_BLOCKED
        assert service.preview_reward(quest.quest_id, "char_001").error.kind == (
            ErrorKind.QUEST_BLOCKED
        )
        db.expire_all()
        assert db.get(QuestModel, quest.quest_id).status == "AVAILABLE"


def test_concurrent_approve_rewards_once(tmp_path):
    """Two sessions approve the same quest; only the first commit pays out."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    setup = factory()
    setup.add(GuildModel(guild_id="guild_001", name="Race"))
    setup.flush()
    setup.add(CharacterModel(character_id="char_001", guild_id="guild_001", name="A"))
    setup.commit()
    quest = _completed(
        QuestService(setup, EventBus()), reward=Reward(exp=10, gold=5)
    )
    setup.close()

    db_a, db_b = factory(), factory()
    try:
        # B has already read the COMPLETED quest when A commits
        assert db_b.get(QuestModel, quest.quest_id).status == "COMPLETED"

        first = QuestService(db_a, EventBus()).approve_quest(
            quest.quest_id, MemberRole.GUILDMASTER
        )
        second = QuestService(db_b, EventBus()).approve_quest(
            quest.quest_id, MemberRole.GUILDMASTER
        )

        assert first.ok
        assert second.error.kind == ErrorKind.INVALID_TRANSITION
    finally:
        db_a.close()
        db_b.close()

    check = factory()
    row = check.get(CharacterModel, "char_001")
    assert row.gold == 5
    assert row.experience == 10
    assert row.completed_quests == 1
    check.close()
    engine.dispose()


def test_purchase_during_approve_keeps_debit(tmp_path, monkeypatch):
    """A purchase committed after approve read the character still counts."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'spend.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    setup = factory()
    setup.add(GuildModel(guild_id="guild_001", name="Spend"))
    setup.flush()
    setup.add(
        CharacterModel(character_id="char_001", guild_id="guild_001", name="A", gold=100)
    )
    setup.commit()
    item = ShopService(setup, EventBus()).create_item(
        "guild_001", "Movie night", Cost(Denomination.GOLD, 50)
    ).value
    quest = _completed(
        QuestService(setup, EventBus()), reward=Reward(exp=10, gold=5)
    )
    setup.close()

    db_a, db_b = factory(), factory()
    purchases = []

    def reward_then_purchase(*args, **kwargs):
        outcome = approve_and_reward(*args, **kwargs)
        purchases.append(
            ShopService(db_b, EventBus()).purchase("char_001", item.item_id)
        )
        return outcome

    monkeypatch.setattr(
        "guildquest.services.quest_service.approve_and_reward", reward_then_purchase
    )
    try:
        result = QuestService(db_a, EventBus()).approve_quest(
            quest.quest_id, MemberRole.GUILDMASTER
        )
        assert result.ok
        assert purchases[0].ok
        assert result.value.character.gold == 55
    finally:
        db_a.close()
        db_b.close()

    check = factory()
    row = check.get(CharacterModel, "char_001")
    assert row.gold == 55
    assert row.total_gold_earned == 5
    assert row.completed_quests == 1
    check.close()
    engine.dispose()
