from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator
import logging

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.pool import StaticPool

"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Explicitly constructed storage handle.

    Owns the async engine and session factory. Created once at process start
    (see app.py lifespan), handed to services that need their own transaction,
    and disposed at shutdown. Nothing in the codebase imports a global engine.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = make_url(url)
        engine_kwargs = {"echo": echo}

        if self.is_sqlite:
            if self.url.database in (None, "", ":memory:"):
                # Every new connection to :memory: is a fresh database,
                # so share one connection for the whole process
                engine_kwargs["poolclass"] = StaticPool
                engine_kwargs["connect_args"] = {"check_same_thread": False}
            else:
                Path(self.url.database).parent.mkdir(parents=True, exist_ok=True)
        else:
            engine_kwargs["isolation_level"] = "READ COMMITTED"
            engine_kwargs["pool_pre_ping"] = True

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        self.session_maker = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

        if self.is_sqlite:
            event.listen(self.engine.sync_engine, "connect", _set_sqlite_pragma)

    @property
    def is_sqlite(self) -> bool:
        return self.url.get_backend_name() == "sqlite"

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        session = self.session_maker()
        try:
            yield session
        finally:
            await session.close()

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
