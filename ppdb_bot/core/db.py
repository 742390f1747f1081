import ssl
from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from ppdb_bot.core.config import settings


def engine_options(use_ssl: bool | None = None) -> Dict[str, Any]:
    """Keyword arguments shared by the app engine and the alembic engine."""
    use_ssl = settings.DATABASE_SSL if use_ssl is None else use_ssl
    options: Dict[str, Any] = {"pool_pre_ping": True}
    if use_ssl:
        # Supabase / Neon only accept TLS connections
        options["connect_args"] = {"ssl": ssl.create_default_context()}
    return options


engine = create_async_engine(settings.DATABASE_URL, echo=False, **engine_options())

AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db():
    """FastAPI dependency: one session per webhook request."""
    async with AsyncSessionLocal() as session:
        yield session
