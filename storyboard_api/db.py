import asyncio
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from storyboard_api.config import Settings
from storyboard_api.logging_config import get_logger

logger = get_logger(__name__)

# SQLAlchemy Base for models
Base = declarative_base()


class Database:
    """
    Owns the async engine and session factory for one application instance.

    Constructed explicitly by the application lifespan and handed to request
    handlers through ``app.state``; nothing in the package holds a global
    engine.
    """

    def __init__(
        self,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 20,
        echo: bool = False,
    ):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(
            url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            echo=echo,
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def check_connection(self) -> bool:
        """Check if database connection is healthy"""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    async def connect_with_retry(self, max_retries: int = 3, delay: float = 1.0) -> bool:
        """Open a first connection, retrying while the server comes up"""
        for attempt in range(max_retries):
            try:
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info("Database connected successfully")
                return True
            except Exception as e:
                logger.warning(f"Database connection attempt {attempt + 1} failed: {e}")
                if attempt < max_retries - 1:
                    await asyncio.sleep(delay)
                else:
                    logger.error("Failed to connect to database after all retries")
                    raise
        return False

    async def disconnect(self) -> None:
        await self.engine.dispose()
        logger.info("Database engine disposed")


def get_database(request: Request) -> Database:
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database is not initialised; is the application lifespan running?")
    return database


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a session bound to the app's Database"""
    database = get_database(request)
    async with database.session() as session:
        yield session
