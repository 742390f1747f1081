from __future__ import annotations

import logging
from typing import Dict, Optional, Protocol

import redis.asyncio as redis
from pydantic import ValidationError

from ppdb_bot.domain.models.intake import Session

logger = logging.getLogger("cache.session_store")


class SessionStore(Protocol):
    async def get(self, user_id: str) -> Optional[Session]: ...

    async def put(self, session: Session) -> None: ...

    async def delete(self, user_id: str) -> None: ...


class InMemorySessionStore:
    """Process-local sessions. Everything in flight is lost on restart.

    Sessions are copied in and out so a caller only changes stored state
    through ``put``.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Session] = {}

    async def get(self, user_id: str) -> Optional[Session]:
        session = self._sessions.get(user_id)
        return session.model_copy(deep=True) if session is not None else None

    async def put(self, session: Session) -> None:
        self._sessions[session.user_id] = session.model_copy(deep=True)

    async def delete(self, user_id: str) -> None:
        self._sessions.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore:
    """Sessions as JSON in redis, shared between workers.

    Keys carry no TTL: an abandoned intake stays until reset or completed.
    """

    def __init__(self, redis_url: str = "", client: redis.Redis | None = None):
        if client is None:
            if not redis_url:
                raise RuntimeError("REDIS_URL is not set")
            client = redis.from_url(redis_url, decode_responses=True)
        self._r = client

    def _key(self, user_id: str) -> str:
        return f"ppdb:session:{user_id}"

    async def get(self, user_id: str) -> Optional[Session]:
        raw = await self._r.get(self._key(user_id))
        if not raw:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError:
            logger.warning("Dropping unreadable session for user_id=%s", user_id)
            await self._r.delete(self._key(user_id))
            return None

    async def put(self, session: Session) -> None:
        await self._r.set(self._key(session.user_id), session.model_dump_json())

    async def delete(self, user_id: str) -> None:
        await self._r.delete(self._key(user_id))


def build_session_store(backend: str, redis_url: str = "") -> SessionStore:
    if backend == "redis":
        return RedisSessionStore(redis_url)
    if backend == "memory":
        return InMemorySessionStore()
    raise RuntimeError(f"Unknown SESSION_BACKEND: {backend}")
