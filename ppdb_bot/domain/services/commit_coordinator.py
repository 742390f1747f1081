# ppdb_bot/domain/services/commit_coordinator.py
"""
Turns a finished session into a persisted registration.

One insert per session. The quota decrement afterwards is best effort and
never undoes the insert. The session is removed whatever the outcome so a
failed commit cannot leave the user stuck on the last step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ppdb_bot.domain.errors import PersistFailure
from ppdb_bot.domain.models.intake import CompletedRecord, Session

logger = logging.getLogger("domain.commit_coordinator")

# Stored instead of NULL for identity fields the flow did not collect
MISSING_PLACEHOLDER = "BELUM ADA"

IDENTITY_FIELDS = ("name", "birthdate", "family_id")


class RecordWriter(Protocol):
    async def insert(self, row: dict) -> str: ...


class CapacityCounter(Protocol):
    async def decrement(self, category: str) -> Optional[int]: ...


class SessionRemover(Protocol):
    async def delete(self, user_id: str) -> None: ...


@dataclass
class CommitResult:
    ok: bool
    record_id: Optional[str] = None
    error: Optional[str] = None


def build_record(session: Session, placeholder: str = MISSING_PLACEHOLDER) -> CompletedRecord:
    fields = dict(session.fields)
    identity = {key: fields.pop(key, None) or placeholder for key in IDENTITY_FIELDS}
    fields.pop("category", None)
    return CompletedRecord(
        user_id=session.user_id,
        category=session.category,
        documents=fields,
        **identity,
    )


class CommitCoordinator:
    def __init__(
        self,
        records: RecordWriter,
        counter: CapacityCounter,
        sessions: SessionRemover,
        placeholder: str = MISSING_PLACEHOLDER,
    ):
        self._records = records
        self._counter = counter
        self._sessions = sessions
        self._placeholder = placeholder

    async def commit(self, session: Session) -> CommitResult:
        record = build_record(session, self._placeholder)
        try:
            record_id = await self._records.insert(record.to_row())
        except PersistFailure as exc:
            logger.error(
                "persist_failure user_id=%s category=%s: %s",
                session.user_id, record.category, exc,
            )
            return CommitResult(ok=False, error=str(exc))
        except Exception as exc:
            # Driver errors the writer did not translate still end the intake
            logger.exception(
                "persist_failure user_id=%s category=%s: unexpected %s",
                session.user_id, record.category, type(exc).__name__,
            )
            return CommitResult(ok=False, error=str(exc))
        finally:
            await self._sessions.delete(session.user_id)

        logger.info(
            "New registration %s: %s (%s)",
            record_id, record.name, record.category.value if record.category else "-",
        )

        if record.category is not None:
            await self._decrement(record.category.value)

        return CommitResult(ok=True, record_id=record_id)

    async def _decrement(self, category: str) -> None:
        try:
            await self._counter.decrement(category)
        except Exception as exc:
            # The registration is already stored; the counter is fixed by an operator
            logger.warning("quota decrement failed category=%s: %s", category, exc)
