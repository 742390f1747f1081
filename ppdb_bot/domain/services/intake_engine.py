# ppdb_bot/domain/services/intake_engine.py
"""
Step-driven intake engine.

One inbound message in, one :class:`Reply` out. The engine resolves the
current step from the :class:`StepCatalog`, validates the answer, stores
it in the session and either moves to the next step or hands the session
to the :class:`CommitCoordinator` once the terminal step is done.

States per user::

    NoSession ── "daftar" ──► AwaitingStep(1) ── valid answer ──► AwaitingStep(n+1)
        ▲                         │                                  │
        └── MENU / commit / ◄─────┴──── terminal step done ──► Committing
            missing instruction

Messages of one user are processed strictly one after another; different
users never wait on each other.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Protocol

from ppdb_bot.domain.errors import (
    CategoryLockedError,
    LookupInconsistency,
    UploadError,
    ValidationFailure,
)
from ppdb_bot.domain.models.intake import (
    Category,
    InboundMessage,
    InputKind,
    Session,
    StepDefinition,
)
from ppdb_bot.domain.services.commit_coordinator import CommitCoordinator
from ppdb_bot.domain.services.faq_service import FaqService
from ppdb_bot.domain.services.responder import Responder
from ppdb_bot.domain.services.step_catalog import StepCatalog
from ppdb_bot.domain.services.validators import (
    Err,
    validate_category,
    validate_composite_identity,
    validate_file,
    validate_text,
)
from ppdb_bot.infrastructure.cache.session_store import SessionStore

logger = logging.getLogger("domain.intake_engine")

RESET_COMMANDS = {"menu", "help", "start", "mulai"}
START_TRIGGER = "daftar"

# Field keys with dedicated validators
COMPOSITE_FIELD_KEY = "data_diri"
CATEGORY_FIELD_KEY = "jenjang"


class Uploader(Protocol):
    async def upload(
        self, file_kind: str, file_ref: str, key_prefix: str, mime_type: Optional[str] = None
    ) -> str: ...


class Outcome(str, Enum):
    HELP = "help"
    FAQ = "faq"
    INSTRUCTION = "instruction"
    STEP_UNAVAILABLE = "step_unavailable"
    INSTRUCTION_MISSING = "instruction_missing"
    VALIDATION_FAILED = "validation_failed"
    UPLOAD_FAILED = "upload_failed"
    COMMITTED = "committed"
    COMMIT_FAILED = "commit_failed"


@dataclass
class Reply:
    text: str
    outcome: Outcome
    failure: Optional[ValidationFailure] = None
    record_id: Optional[str] = None


class _UserLocks:
    """FIFO lock per user id, dropped again once nobody holds or awaits it."""

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, user_id: str):
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._users[user_id] = self._users.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[user_id] -= 1
            if not self._users[user_id]:
                del self._users[user_id]
                del self._locks[user_id]

    def __len__(self) -> int:
        return len(self._locks)


class IntakeEngine:
    def __init__(
        self,
        catalog: StepCatalog,
        store: SessionStore,
        uploader: Uploader,
        committer: CommitCoordinator,
        responder: Optional[Responder] = None,
        faq: Optional[FaqService] = None,
    ):
        self._catalog = catalog
        self._store = store
        self._uploader = uploader
        self._committer = committer
        self._responder = responder or Responder()
        self._faq = faq
        self._locks = _UserLocks()

    async def handle(self, message: InboundMessage) -> Reply:
        async with self._locks.hold(message.user_id):
            return await self._dispatch(message)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch(self, message: InboundMessage) -> Reply:
        text = "" if message.is_file else message.text.strip()
        lower = text.lower()

        if lower in RESET_COMMANDS:
            await self._store.delete(message.user_id)
            return Reply(self._responder.help(), Outcome.HELP)

        session = await self._store.get(message.user_id)
        if session is None:
            return await self._handle_without_session(message.user_id, text, lower)

        return await self._handle_step(session, message, text)

    async def _handle_without_session(self, user_id: str, text: str, lower: str) -> Reply:
        if self._faq is not None:
            keyword = self._faq.match_keyword(lower)
            if keyword:
                content = await self._faq.answer(keyword, text)
                return Reply(self._responder.faq(content), Outcome.FAQ)

        if START_TRIGGER in lower:
            return await self._start(user_id)

        return Reply(self._responder.help(), Outcome.HELP)

    async def _start(self, user_id: str) -> Reply:
        first = await self._catalog.lookup(1, None)
        if first is None:
            logger.error("first step missing, intake not started for user_id=%s", user_id)
            return Reply(self._responder.step_unavailable(1), Outcome.STEP_UNAVAILABLE)

        await self._store.put(Session(user_id=user_id))
        logger.info("intake started user_id=%s", user_id)
        return Reply(self._responder.instruction(first), Outcome.INSTRUCTION)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _handle_step(self, session: Session, message: InboundMessage, text: str) -> Reply:
        try:
            current = await self._catalog.require(session.step, session.category)
        except LookupInconsistency as exc:
            logger.error("%s, aborting intake user_id=%s", exc, session.user_id)
            await self._store.delete(session.user_id)
            return Reply(self._responder.instruction_missing(), Outcome.INSTRUCTION_MISSING)

        rejected = await self._apply_answer(session, current, message, text)
        if rejected is not None:
            return rejected

        following = await self._catalog.lookup(session.step + 1, session.category)
        if following is not None:
            session.advance()
            await self._store.put(session)
            return Reply(self._responder.instruction(following), Outcome.INSTRUCTION)

        if current.is_terminal:
            result = await self._committer.commit(session)
            if result.ok:
                return Reply(self._responder.commit_success(), Outcome.COMMITTED, record_id=result.record_id)
            return Reply(self._responder.commit_failure(), Outcome.COMMIT_FAILED)

        logger.error(
            "next instruction missing before completion step=%s field=%s user_id=%s",
            session.step, current.field_key, session.user_id,
        )
        await self._store.delete(session.user_id)
        return Reply(self._responder.next_instruction_missing(), Outcome.INSTRUCTION_MISSING)

    async def _apply_answer(
        self,
        session: Session,
        current: StepDefinition,
        message: InboundMessage,
        text: str,
    ) -> Optional[Reply]:
        """Validate the answer and write it into *session*.

        Returns a reply when the answer is rejected; the session is then
        left exactly as it was.
        """
        category: Optional[Category] = None

        if current.input_kind == InputKind.TEXT:
            if message.is_file:
                return self._rejected(session, current, ValidationFailure.WRONG_KIND)

            if current.field_key == COMPOSITE_FIELD_KEY:
                result = validate_composite_identity(text)
                if isinstance(result, Err):
                    return self._rejected(session, current, result.reason)
                values = result.value.as_fields()
                category = result.value.category
            elif current.field_key == CATEGORY_FIELD_KEY:
                result = validate_category(text)
                if isinstance(result, Err):
                    return self._rejected(session, current, result.reason)
                category = result.value
                values = {"category": category.value}
            else:
                result = validate_text(text)
                if isinstance(result, Err):
                    return self._rejected(session, current, result.reason)
                values = {current.field_key: result.value}
        else:
            result = validate_file(message.kind, current.input_kind)
            if isinstance(result, Err) or not message.file_ref:
                return self._rejected(session, current, ValidationFailure.WRONG_KIND)
            try:
                url = await self._uploader.upload(
                    message.kind.value,
                    message.file_ref,
                    f"{session.user_id}/{current.field_key}",
                    message.mime_type,
                )
            except UploadError as exc:
                logger.warning(
                    "upload failed user_id=%s field=%s: %s",
                    session.user_id, current.field_key, exc,
                )
                return Reply(self._responder.upload_failed(), Outcome.UPLOAD_FAILED)
            values = {f"{current.field_key}_url": url}

        try:
            session.complete_step(values, category)
        except CategoryLockedError:
            return self._rejected(session, current, ValidationFailure.CATEGORY_LOCKED)
        return None

    def _rejected(
        self, session: Session, current: StepDefinition, reason: ValidationFailure
    ) -> Reply:
        logger.debug(
            "answer rejected user_id=%s step=%s reason=%s",
            session.user_id, session.step, reason.value,
        )
        category = session.category.value if session.category else None
        return Reply(
            self._responder.validation_failure(reason, current, category),
            Outcome.VALIDATION_FAILED,
            failure=reason,
        )
