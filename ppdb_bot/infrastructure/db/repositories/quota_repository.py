from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from ppdb_bot.domain.errors import PersistFailure
from ppdb_bot.infrastructure.db.models import Quota


class QuotaRepository:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def decrement(self, category: str) -> int | None:
        """Decrease the remaining seats of *category* by one.

        Read-then-write: two concurrent commits for the same category can
        both read the same value and decrement only once.  Returns the new
        value, or None when the quota is already exhausted.
        """
        try:
            async with self._session_factory() as db:
                result = await db.execute(
                    select(Quota.remaining).where(Quota.category == category)
                )
                remaining = result.scalar_one_or_none()
                if remaining is None:
                    raise PersistFailure(f"no quota row for category {category}")

                if remaining <= 0:
                    logger.warning("Quota {} already exhausted", category)
                    return None

                await db.execute(
                    update(Quota)
                    .where(Quota.category == category)
                    .values(remaining=remaining - 1)
                )
                await db.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise PersistFailure(f"quota update failed for {category}: {exc}") from exc

        logger.info("Quota {} decreased -> {}", category, remaining - 1)
        return remaining - 1
