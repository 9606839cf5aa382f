from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from shared.helper.HelperConfig import HelperConfig
from shared.store.tables import metadata


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class DatabaseManager:
    """Owns the async engine for the local admin database (DATABASE_URL)."""

    def __init__(self, helper_config: HelperConfig, url: str | None = None):
        self.logging = helper_config.get_logger()
        self.url = url or helper_config.get_string_val("DATABASE_URL", default="sqlite+aiosqlite:///./data/admin.db")
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Create the engine. For file based SQLite the parent directory is created first."""
        url = make_url(self.url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            Path(url.database).expanduser().resolve().parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_async_engine(self.url, pool_pre_ping=True, echo=False)
        self._sessionmaker = async_sessionmaker(self._engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
        self.logging.info("Database engine ready (%s).", url.render_as_string(hide_password=True))

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None

    async def do_init_schema(self) -> None:
        """Create all known tables that do not exist yet."""
        async with self.get_engine().begin() as conn:
            await conn.run_sync(metadata.create_all)
        self.logging.info("Database schema initialised.")

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database not initialised. Call boot() first.")
        return self._engine

    @asynccontextmanager
    async def get_session(self) -> AsyncIterator[AsyncSession]:
        """Session with commit on success and rollback on error."""
        if self._sessionmaker is None:
            raise RuntimeError("Database not initialised. Call boot() first.")
        async with self._sessionmaker() as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                self.logging.error("Database error: %s", e)
                raise
