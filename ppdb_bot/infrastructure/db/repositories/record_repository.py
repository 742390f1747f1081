from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from ppdb_bot.domain.errors import PersistFailure
from ppdb_bot.infrastructure.db.models import IntakeRecord


class IntakeRecordRepository:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def insert(self, row: dict) -> str:
        """Insert one completed registration and return its id."""
        try:
            async with self._session_factory() as db:
                record = IntakeRecord(**row)
                db.add(record)
                await db.commit()
                await db.refresh(record)
                return str(record.id)
        except (SQLAlchemyError, OSError) as exc:
            raise PersistFailure(f"insert into intake_records failed: {exc}") from exc

    async def update_status(self, record_id: UUID, status: str) -> bool:
        """Set the review status of a record. Returns False if no row matched."""
        stmt = (
            update(IntakeRecord)
            .where(IntakeRecord.id == record_id)
            .values(status=status)
        )
        try:
            async with self._session_factory() as db:
                result = await db.execute(stmt)
                await db.commit()
                return result.rowcount > 0
        except (SQLAlchemyError, OSError) as exc:
            raise PersistFailure(f"status update failed for {record_id}: {exc}") from exc
