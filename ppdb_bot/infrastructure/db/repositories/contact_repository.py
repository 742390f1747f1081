from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ppdb_bot.infrastructure.db.models import WaContact


class ContactRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert(self, number: str, name: str) -> None:
        stmt = insert(WaContact).values(number=number, name=name)
        stmt = stmt.on_conflict_do_update(
            index_elements=[WaContact.number],
            set_={"name": stmt.excluded.name, "updated_at": func.now()},
        )
        await self.db.execute(stmt)
        await self.db.commit()
