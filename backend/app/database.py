"""
SnippetHub Backend — Database Handle & Session Management
===========================================================

What:  The `Database` store handle (async engine + session factory), the
       declarative `Base`, and the FastAPI session dependency.
How:   `create_app()` constructs one `Database`, attaches it to
       `app.state.database`; the lifespan connects it on startup and disposes
       it on shutdown. Each request gets its own session that commits on
       success and rolls back on error.
Who:   Routes depend on `get_db_session`; tests build their own `Database`
       against a temporary SQLite file and inject it into `create_app()`.

SQLite specifics:
    - `PRAGMA foreign_keys=ON` on every connection, otherwise the ON DELETE
      CASCADE clauses on tag links, favorites and versions are ignored.
    - The pysqlite/aiosqlite driver issues its own implicit BEGIN, which
      breaks SAVEPOINT handling. We switch the driver to autocommit and emit
      BEGIN from the engine's "begin" event instead, so `begin_nested()`
      (used per record by the importer) behaves like on a server database.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


def _configure_sqlite(engine: AsyncEngine) -> None:
    """Install the connection hooks SQLite needs for cascades and savepoints."""

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Disable the driver's implicit BEGIN; we emit our own below.
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Explicitly constructed store handle.

    Lifecycle:
        db = Database(url)      # no I/O yet
        db.connect()            # builds engine + session factory
        await db.create_all()   # optional: create missing tables
        ...                     # db.session() per unit of work
        await db.dispose()      # closes pooled connections

    Attributes:
        url: SQLAlchemy async URL
        echo: Log every SQL statement (DEBUG only)
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
    ):
        self.url = url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_pre_ping = pool_pre_ping
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return make_url(self.url).get_backend_name() == "sqlite"

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    def connect(self) -> None:
        """Create the engine and session factory. Idempotent."""
        if self._engine is not None:
            return

        kwargs = {"echo": self.echo, "pool_pre_ping": self.pool_pre_ping}
        if self.is_sqlite:
            database = make_url(self.url).database
            if not database or database == ":memory:":
                # One shared connection, otherwise every checkout sees an
                # empty in-memory database.
                kwargs["poolclass"] = StaticPool
        else:
            kwargs.update(
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_recycle=3600,
            )

        engine = create_async_engine(self.url, **kwargs)
        if self.is_sqlite:
            _configure_sqlite(engine)

        self._engine = engine
        # expire_on_commit=False: ORM objects stay readable after commit
        # without an implicit (and in async, illegal) lazy refresh.
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("Database engine created for %s", make_url(self.url).render_as_string(hide_password=True))

    def session(self) -> AsyncSession:
        """Open a new session; use as `async with db.session() as session:`."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._session_factory()

    async def create_all(self) -> None:
        """Create any missing tables from the ORM metadata."""
        # Registers every model on Base.metadata.
        import app.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured (%d tables)", len(Base.metadata.tables))

    async def ping(self) -> bool:
        """Run `SELECT 1`; returns False instead of raising."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """Close all pooled connections. Safe to call when never connected."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database engine disposed")


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the application's Database handle
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global handlers
        5. Always: closes the session (returns the connection to the pool)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
