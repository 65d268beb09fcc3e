"""
SQLAlchemy async engine and session management

This module provides:
1. AsyncEngineManager: creates the engine lazily and rebinds it when the event loop changes
2. Base: declarative base for every ORM model
3. Database: injectable session provider used by the unit of work

PostgreSQL (asyncpg) is the production target. SQLite (aiosqlite) is accepted for local
runs and tests; its connections are switched to ``BEGIN IMMEDIATE`` so that concurrent
write transactions serialize the same way row locks do on PostgreSQL.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import orjson
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


def _json_serializer(obj: Any) -> str:
    return orjson.dumps(obj).decode('utf-8')


def _enable_sqlite_immediate_transactions(engine: AsyncEngine) -> None:
    """
    https://docs.sqlalchemy.org/en/20/dialects/sqlite.html#serializable-isolation-savepoints-transactional-ddl
    """

    @event.listens_for(engine.sync_engine, 'connect')
    def _do_connect(dbapi_connection: Any, connection_record: Any) -> None:
        # Disable the driver's own BEGIN so the one below is the only one emitted
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA busy_timeout = 30000')
        cursor.close()

    @event.listens_for(engine.sync_engine, 'begin')
    def _do_begin(conn: Any) -> None:
        conn.exec_driver_sql('BEGIN IMMEDIATE')


class AsyncEngineManager:
    """
    Ensures the engine is always bound to the current event loop to prevent
    "Task got Future attached to a different loop" errors.
    """

    def __init__(self, url: str) -> None:
        self._url = url
        self._engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_sqlite(self) -> bool:
        return self._url.startswith('sqlite')

    def get_engine(self) -> AsyncEngine:
        try:
            current_loop: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if self._engine is None or (current_loop is not None and self._loop is not current_loop):
            if self._engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, recreating engine...')
            self._engine = self._create_engine()
            self._session_maker = None
            self._loop = current_loop

        return self._engine

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine()
        if self._session_maker is None:
            self._session_maker = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_maker

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_maker = None
        self._loop = None

    def _create_engine(self) -> AsyncEngine:
        if self.is_sqlite:
            engine = create_async_engine(
                self._url,
                echo=False,
                json_serializer=_json_serializer,
            )
            _enable_sqlite_immediate_transactions(engine)
            Logger.base.info('🔗 [DB] SQLite engine created (immediate transactions)')
            return engine

        Logger.base.info('🔗 [DB] PostgreSQL engine created')
        return create_async_engine(
            self._url,
            echo=False,
            json_serializer=_json_serializer,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


class Base(DeclarativeBase):
    pass


class Database:
    """
    Database class for dependency injection

    Owns one AsyncEngineManager. Sessions never expire attributes on commit so entities
    can be mapped after the transaction ends.
    """

    def __init__(self, *, url: str | None = None) -> None:
        self._engine_manager = AsyncEngineManager(url or settings.DATABASE_URL_ASYNC)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine_manager.get_engine()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for database sessions (rolls back on exception)"""
        session_maker = self._engine_manager.get_session_maker()
        async with session_maker() as session:
            yield session

    async def create_tables(self) -> None:
        """Create database tables if they don't exist"""
        # Import models so they register on Base.metadata
        from src.service.ticketing.driven_adapter import model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        Logger.base.info('🗄️  [DB] Tables ensured')

    async def drop_tables(self) -> None:
        from src.service.ticketing.driven_adapter import model  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self._engine_manager.dispose()
