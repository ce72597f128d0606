"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from guildquest.api.characters import router as characters_router
from guildquest.api.effects import router as effects_router
from guildquest.api.guilds import router as guilds_router
from guildquest.api.health import router as health_router
from guildquest.api.quests import router as quests_router
from guildquest.api.shop import router as shop_router
from guildquest.config import settings
from guildquest.core.logging import get_logger, setup_logging
from guildquest.db.database import engine as db_engine
from guildquest.db.models import Base

setup_logging(settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=db_engine)
    logger.info("Database tables created.")

    yield

    logger.info("Shutting down...")
    db_engine.dispose()


app = FastAPI(title="Guild Quest", lifespan=lifespan)

app.include_router(health_router)
app.include_router(guilds_router)
app.include_router(characters_router)
app.include_router(quests_router)
app.include_router(effects_router)
app.include_router(shop_router)
