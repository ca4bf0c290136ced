"""Async engine for the ledger event log.

Only DatabaseEventWriter and the startup probe touch the database; ledger
state itself lives in memory. No connection is opened until first use,
so importing this module never needs a running Postgres.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=5,
    max_overflow=5,
)

# One short transaction per event; rows are never read back through the ORM
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def ping_database() -> None:
    """Raise if the event-log database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
