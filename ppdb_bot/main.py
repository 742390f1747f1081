from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from ppdb_bot.api.deps import build_engine
from ppdb_bot.api.routes import api_router
from ppdb_bot.core.config import settings
from ppdb_bot.core.db import engine as db_engine
from ppdb_bot.core.logging_config import setup_logging
from ppdb_bot.domain.services.responder import Responder
from ppdb_bot.infrastructure.db.base import Base


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app.state.engine = build_engine()
    app.state.responder = Responder()
    logger.info("PPDB bot started (env={}, sessions={})", settings.ENV, settings.SESSION_BACKEND)
    yield
    await db_engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(title="PPDB WhatsApp Bot", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.DASHBOARD_ORIGIN],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)
    return app


app = create_app()
