from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional
import asyncio
import logging

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from .config import Settings, engine_options

# Setup logging
logger = logging.getLogger(__name__)

Row = Dict[str, Any]


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine described by ``settings``."""
    options = engine_options(settings)
    url = options.pop("url")
    logger.info(f"Using database: {url.render_as_string(hide_password=True)}")

    engine = create_async_engine(url, **options)

    if url.get_backend_name() == "sqlite":
        # SQLite only honours ON DELETE CASCADE with this pragma set per connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


class Gateway:
    """The single database connection shared by every request.

    Statements are serialized with a lock, because the async drivers
    refuse concurrent operations on one connection. Each call to
    ``fetch_all`` or ``run_script`` is its own transaction.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._conn: Optional[AsyncConnection] = None
        self._lock = asyncio.Lock()

    @property
    def connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> None:
        if self._conn is not None:
            return
        self._conn = await self.engine.connect()
        logger.info("Database connected")

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
        await self.engine.dispose()

    def _connection(self) -> AsyncConnection:
        if self._conn is None:
            raise RuntimeError("Gateway is not connected")
        return self._conn

    async def fetch_all(self, statement, params: Optional[Mapping[str, Any]] = None) -> List[Row]:
        """Run one statement and return its rows as column -> value dicts."""
        async with self._lock:
            conn = self._connection()
            try:
                result = await conn.execute(statement, params)
                rows = [dict(row._mapping) for row in result] if result.returns_rows else []
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
            return rows

    async def run_script(self, script: Callable[[AsyncConnection], Awaitable[None]]) -> None:
        """Run ``script`` against the connection inside one transaction."""
        async with self._lock:
            conn = self._connection()
            try:
                await script(conn)
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise


# Dependency to get the gateway the app was started with
def get_gateway(request: Request) -> Gateway:
    return request.app.state.gateway
