"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from guildquest.core.event_bus import EventBus
from guildquest.core.quest.enums import MemberRole
from guildquest.db.database import get_db
from guildquest.db.models import Base, CharacterModel, GuildModel, MemberModel
from guildquest.main import app

TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(bind=TEST_ENGINE, autocommit=False, autoflush=False)


def _override_get_db():
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture(autouse=True)
def _reset_schema():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=TEST_ENGINE)
    yield
    Base.metadata.drop_all(bind=TEST_ENGINE)


@pytest.fixture()
def client() -> TestClient:
    """FastAPI TestClient wired to an in-memory SQLite database."""
    return TestClient(app)


@pytest.fixture()
def db_session() -> Session:
    """Raw database session for direct DB assertions."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def household(db_session: Session) -> dict[str, str]:
    """One guild with a guildmaster, a player and the player's character."""
    db_session.add(GuildModel(guild_id="guild_001", name="Kim household"))
    db_session.flush()
    db_session.add_all(
        [
            MemberModel(
                member_id="member_gm",
                guild_id="guild_001",
                name="Parent",
                role=MemberRole.GUILDMASTER.value,
            ),
            MemberModel(
                member_id="member_player",
                guild_id="guild_001",
                name="Kid",
                role=MemberRole.PLAYER.value,
            ),
        ]
    )
    db_session.flush()
    db_session.add(
        CharacterModel(
            character_id="char_001",
            guild_id="guild_001",
            member_id="member_player",
            name="Hero",
        )
    )
    db_session.commit()
    return {
        "guild_id": "guild_001",
        "gm_id": "member_gm",
        "player_id": "member_player",
        "character_id": "char_001",
    }
