# ppdb_bot/api/deps.py
"""
Shared FastAPI dependencies and the wiring of the intake engine.

The engine and its collaborators are built once at startup and kept on
``app.state`` so every request shares the same session store and the
same per-user locks.
"""

from fastapi import HTTPException, Request

from ppdb_bot.core.config import settings
from ppdb_bot.core.db import AsyncSessionLocal
from ppdb_bot.domain.services.commit_coordinator import CommitCoordinator
from ppdb_bot.domain.services.faq_service import FaqService
from ppdb_bot.domain.services.intake_engine import IntakeEngine
from ppdb_bot.domain.services.responder import Responder
from ppdb_bot.domain.services.step_catalog import StepCatalog
from ppdb_bot.infrastructure.cache.session_store import build_session_store
from ppdb_bot.infrastructure.db.repositories import (
    FaqRepository,
    IntakeRecordRepository,
    QuotaRepository,
    SqlStepSource,
)
from ppdb_bot.infrastructure.external.media_uploader import MediaUploader
from ppdb_bot.infrastructure.external.supabase_storage import SupabaseStorage


def build_engine(session_factory=AsyncSessionLocal) -> IntakeEngine:
    store = build_session_store(settings.SESSION_BACKEND, settings.REDIS_URL)
    catalog = StepCatalog(SqlStepSource(session_factory, settings.TERMINAL_FIELD_KEY))
    committer = CommitCoordinator(
        records=IntakeRecordRepository(session_factory),
        counter=QuotaRepository(session_factory),
        sessions=store,
    )
    return IntakeEngine(
        catalog=catalog,
        store=store,
        uploader=MediaUploader(SupabaseStorage()),
        committer=committer,
        responder=Responder(),
        faq=FaqService(FaqRepository(session_factory).get),
    )


def get_engine(request: Request) -> IntakeEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Intake engine is not ready")
    return engine


def get_responder(request: Request) -> Responder:
    return getattr(request.app.state, "responder", None) or Responder()


def get_record_repository(request: Request) -> IntakeRecordRepository:
    return getattr(request.app.state, "records", None) or IntakeRecordRepository(AsyncSessionLocal)


def whatsapp_configured() -> bool:
    return bool(settings.WHATSAPP_ACCESS_TOKEN and settings.WHATSAPP_PHONE_NUMBER_ID)
