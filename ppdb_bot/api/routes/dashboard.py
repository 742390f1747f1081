# ppdb_bot/api/routes/dashboard.py
"""
Endpoints called by the operator dashboard.
"""

from typing import Any
from uuid import UUID

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import AliasChoices, BaseModel, Field

from ppdb_bot.api.deps import get_record_repository, whatsapp_configured
from ppdb_bot.domain.errors import PersistFailure
from ppdb_bot.infrastructure.db.repositories import IntakeRecordRepository
from ppdb_bot.infrastructure.external.whatsapp_client import (
    normalize_number,
    send_whatsapp_text,
)

router = APIRouter(tags=["dashboard"])


class SendMessageIn(BaseModel):
    number: str = Field(default="", validation_alias=AliasChoices("number", "nomor"))
    message: str = Field(default="", validation_alias=AliasChoices("message", "pesan"))


class ApproveIn(BaseModel):
    id: UUID | None = None
    number: str = Field(default="", validation_alias=AliasChoices("number", "nomor"))
    message: str = Field(default="", validation_alias=AliasChoices("message", "pesan"))
    status: str = "approved"


def _error(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})


@router.post("/send-message")
async def send_message(payload: SendMessageIn) -> Any:
    if not whatsapp_configured():
        return _error(503, "WhatsApp is not ready")

    to = normalize_number(payload.number)
    if not to or not payload.message:
        return _error(400, "number & message are required")

    try:
        await send_whatsapp_text(to, payload.message)
    except httpx.HTTPError as exc:
        logger.error("send-message to {} failed: {}", to, exc)
        return _error(502, str(exc))
    return {"ok": True}


@router.post("/approve-and-notify")
async def approve_and_notify(
    payload: ApproveIn,
    records: IntakeRecordRepository = Depends(get_record_repository),
) -> Any:
    to = normalize_number(payload.number)
    if payload.id is None or not to:
        return _error(400, "id & number are required")

    try:
        found = await records.update_status(payload.id, payload.status)
    except PersistFailure as exc:
        logger.error("approve-and-notify failed for {}: {}", payload.id, exc)
        return _error(500, str(exc))
    if not found:
        return _error(404, "Record not found")

    notified = False
    if payload.message and whatsapp_configured():
        try:
            await send_whatsapp_text(to, payload.message)
            notified = True
        except httpx.HTTPError as exc:
            logger.error("Notification to {} failed: {}", to, exc)

    return {"ok": True, "status": payload.status, "notified": notified}
