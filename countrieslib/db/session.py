import os

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from countrieslib.config import settings

# Ensure data directory exists (skip on Vercel — uses /tmp)
if not os.environ.get("VERCEL"):
    _data_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "data")
    os.makedirs(_data_dir, exist_ok=True)


def make_engine(url: str) -> AsyncEngine:
    # Scheduler jobs each run on a fresh event loop, so connections are not pooled across them.
    return create_async_engine(url, echo=False, poolclass=NullPool)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = make_engine(settings.DATABASE_URL)
async_session_factory = make_session_factory(engine)


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create all tables if they don't exist."""
    from countrieslib.models import Base
    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
