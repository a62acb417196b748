"""
SQLAlchemy async engine and session management

The engine (and its connection pool) is owned by a `Database` instance. The
application lifespan creates it through the DI container and disposes it on
shutdown; nothing here caches a connection at module level.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from eventbook.platform.exception.exceptions import TransactionAbortedError
from eventbook.platform.logging.loguru_io import Logger


class Base(DeclarativeBase):
    pass


class Database:
    """
    Owns one async engine and hands out sessions.

    Store failures escaping a session are reported as `TransactionAbortedError`
    so callers never see driver exceptions.
    """

    def __init__(
        self,
        *,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ) -> None:
        self._url = make_url(url)
        self._engine: AsyncEngine = create_async_engine(
            self._url, echo=echo, **self._engine_options(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                pool_pre_ping=pool_pre_ping,
            )
        )
        if self.is_sqlite:
            event.listen(self._engine.sync_engine, 'connect', _enable_sqlite_foreign_keys)
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        Logger.base.info(f'🔗 [DB] Engine created for {self._url.render_as_string()}')

    @property
    def is_sqlite(self) -> bool:
        return self._url.get_backend_name() == 'sqlite'

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    def _engine_options(self, **pool_options: Any) -> dict[str, Any]:
        if self.is_sqlite:
            # SQLite serializes writers itself; wait on the file lock instead of failing fast
            return {'connect_args': {'timeout': 30}}
        return pool_options

    async def create_tables(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️  [DB] Tables ensured')

    async def dispose(self) -> None:
        await self._engine.dispose()
        Logger.base.info('🔌 [DB] Engine disposed')

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session context; rolls back on exception and closes on exit."""
        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                Logger.base.error(f'💥 [DB] {type(e).__name__}: {e}')
                raise TransactionAbortedError() from e


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()
