from sqlalchemy import select

from ppdb_bot.infrastructure.db.models import FaqEntry


class FaqRepository:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def get(self, keyword: str, subkey: str | None = None) -> str | None:
        stmt = select(FaqEntry.content).where(FaqEntry.keyword == keyword)
        if subkey:
            stmt = stmt.where(FaqEntry.subkey == subkey)
        else:
            stmt = stmt.where(FaqEntry.subkey.is_(None))
        stmt = stmt.order_by(FaqEntry.id).limit(1)

        async with self._session_factory() as db:
            result = await db.execute(stmt)
            return result.scalar_one_or_none()
