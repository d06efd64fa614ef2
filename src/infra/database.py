"""
PostgreSQL record store for the web app: `web_app_data` and `realm_hunter_data`
"""

from typing import Optional, AsyncGenerator
from functools import lru_cache
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine

from src.infra.config.settings import get_settings
from src.infra.models import Base
from src.core.exceptions.base import ServiceError
from src.core.logger.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()


def record_store_url() -> str:
    return (
        f"postgresql+asyncpg://{settings.POSTGRES_USER}:{settings.POSTGRES_PASSWORD}"
        f"@{settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}/{settings.POSTGRES_DB}"
    )


class RecordStore:
    """
    Engine and session factory of the record store.

    The engine is built on first use and opens no connection by itself, so
    routes that never touch the store keep working while Postgres is down.
    Connection and query failures surface in the repositories, which wrap
    them as DATABASE_ERROR.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url or record_store_url()
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(
                self.url,
                echo=settings.DB_LOGGING_ENABLED,
                pool_pre_ping=True,
                pool_size=settings.POSTGRES_MIN_POOL_SIZE,
                max_overflow=settings.POSTGRES_MAX_POOL_SIZE - settings.POSTGRES_MIN_POOL_SIZE,
                pool_recycle=3600,
                # asyncpg cancels any statement running past this
                connect_args={"command_timeout": settings.DB_QUERY_TIMEOUT}
            )
            self._sessions = async_sessionmaker(self._engine, expire_on_commit=False, autoflush=False)
            logger.info(
                "Record store engine created",
                extra={
                    "host": self._engine.url.host,
                    "database": self._engine.url.database,
                    "pool_size": f"{settings.POSTGRES_MIN_POOL_SIZE}-{settings.POSTGRES_MAX_POOL_SIZE}"
                }
            )
        return self._engine

    def session(self) -> AsyncSession:
        self.engine
        return self._sessions()

    async def ensure_schema(self) -> None:
        """Create the web app tables if they do not exist yet"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Record store tables ensured", extra={"tables": sorted(Base.metadata.tables)})

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        if self._engine is None:
            return
        try:
            await self._engine.dispose()
            logger.info("Record store engine closed")
        except Exception as e:
            logger.error(f"Error closing record store engine: {e}")
        finally:
            self._engine = None
            self._sessions = None


@lru_cache()
def get_record_store() -> RecordStore:
    return RecordStore()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database session
    Use with FastAPI Depends()
    """
    async with get_record_store().session() as session:
        try:
            yield session
        except ServiceError:
            await session.rollback()
            raise
        except Exception as e:
            await session.rollback()
            logger.error(f"Database session error: {e}")
            raise
