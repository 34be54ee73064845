import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine

from countrieslib.db.session import init_db, make_engine, make_session_factory
from countrieslib.models.cached_payload import CachedPayload

logger = logging.getLogger(__name__)


@dataclass
class StoredPayload:
    data: Any
    fetched_at: datetime


class CountryStore:
    """Persists the last good API payload per cache key."""

    def __init__(self, url: str | None = None, engine: AsyncEngine | None = None):
        if engine is None:
            if url is None:
                from countrieslib.db.session import engine as default_engine
                engine = default_engine
            else:
                engine = make_engine(url)
        self.engine = engine
        self._session_factory = make_session_factory(engine)
        self._schema_ready = False

    async def _ensure_schema(self) -> None:
        if not self._schema_ready:
            await init_db(self.engine)
            self._schema_ready = True

    async def get(self, key: str) -> StoredPayload | None:
        await self._ensure_schema()
        async with self._session_factory() as session:
            row = await session.get(CachedPayload, key)
            if row is None:
                return None
            fetched_at = row.fetched_at
            # SQLite drops the offset on round trip; values are always written in UTC.
            if fetched_at.tzinfo is None:
                fetched_at = fetched_at.replace(tzinfo=timezone.utc)
            return StoredPayload(data=row.payload, fetched_at=fetched_at)

    async def set(self, key: str, data: Any, fetched_at: datetime) -> None:
        await self._ensure_schema()
        async with self._session_factory() as session:
            row = await session.get(CachedPayload, key)
            if row is None:
                row = CachedPayload(key=key, fetched_at=fetched_at)
                session.add(row)
            row.payload = data
            row.fetched_at = fetched_at
            await session.commit()
        logger.debug("Stored payload for key=%s", key)
