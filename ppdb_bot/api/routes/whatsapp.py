# ppdb_bot/api/routes/whatsapp.py
"""
WhatsApp Cloud API webhook.

Each inbound message is classified into an ``InboundMessage``, handed to
the intake engine and answered with exactly one text message. Nothing
raised while handling a message escapes this module.
"""

from typing import Any

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ppdb_bot.api.deps import get_engine, get_responder
from ppdb_bot.core.config import settings
from ppdb_bot.core.db import get_db
from ppdb_bot.domain.models.intake import InboundMessage, MessageKind
from ppdb_bot.domain.services.intake_engine import IntakeEngine
from ppdb_bot.domain.services.responder import Responder
from ppdb_bot.infrastructure.db.repositories import ContactRepository
from ppdb_bot.infrastructure.external.whatsapp_client import send_whatsapp_text

router = APIRouter()

DEFAULT_PUSH_NAME = "Tanpa Nama"


def parse_message(message: dict, push_name: str | None = None) -> InboundMessage | None:
    """Classify one Cloud API message; None for kinds the bot ignores."""
    wa_id = message.get("from")
    msg_type = message.get("type")
    if not wa_id or not msg_type:
        return None

    if msg_type == "text":
        body = (message.get("text") or {}).get("body", "")
        return InboundMessage(user_id=wa_id, kind=MessageKind.TEXT, text=body, push_name=push_name)

    if msg_type in ("image", "video", "document"):
        media = message.get(msg_type) or {}
        mime = media.get("mime_type") or ""
        kind = MessageKind(msg_type)
        # photos sent "as document" still count as images
        if kind == MessageKind.DOCUMENT and mime.startswith("image/"):
            kind = MessageKind.IMAGE
        return InboundMessage(
            user_id=wa_id,
            kind=kind,
            file_ref=media.get("id"),
            mime_type=mime or None,
            push_name=push_name,
        )

    return None


def extract_messages(body: dict[str, Any]) -> list[InboundMessage]:
    inbound: list[InboundMessage] = []
    for entry in body.get("entry") or []:
        for change in entry.get("changes") or []:
            value = change.get("value") or {}
            names = {
                c.get("wa_id"): (c.get("profile") or {}).get("name")
                for c in value.get("contacts") or []
            }
            for message in value.get("messages") or []:
                parsed = parse_message(message, names.get(message.get("from")))
                if parsed is not None:
                    inbound.append(parsed)
    return inbound


@router.get("/webhook", response_class=PlainTextResponse)
async def verify(request: Request):
    params = request.query_params
    if (
        params.get("hub.mode") == "subscribe"
        and params.get("hub.verify_token") == settings.WHATSAPP_VERIFY_TOKEN
    ):
        return params.get("hub.challenge", "")
    return PlainTextResponse("Verification failed", status_code=403)


@router.post("/webhook")
async def webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    engine: IntakeEngine = Depends(get_engine),
    responder: Responder = Depends(get_responder),
):
    body = await request.json()
    for message in extract_messages(body):
        await handle_message(message, db=db, engine=engine, responder=responder)
    return {"status": "ok"}


async def handle_message(
    message: InboundMessage,
    *,
    db: AsyncSession,
    engine: IntakeEngine,
    responder: Responder,
    send=None,
) -> str:
    send = send or send_whatsapp_text
    try:
        await ContactRepository(db).upsert(message.user_id, message.push_name or DEFAULT_PUSH_NAME)
    except Exception as exc:
        # Contacts are bookkeeping only; the applicant still gets a reply
        logger.warning("Contact upsert failed for {}: {}", message.user_id, exc)
        if isinstance(exc, SQLAlchemyError):
            try:
                await db.rollback()
            except (SQLAlchemyError, OSError) as rollback_exc:
                logger.warning("Rollback after contact upsert failed: {}", rollback_exc)

    try:
        reply = (await engine.handle(message)).text
    except Exception:
        logger.exception("Unhandled error while processing message from {}", message.user_id)
        reply = responder.internal_error()

    try:
        await send(message.user_id, reply)
    except (httpx.HTTPError, RuntimeError) as exc:
        logger.error("Reply to {} could not be sent: {}", message.user_id, exc)
    return reply
