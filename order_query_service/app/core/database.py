"""Order store connection management: async engine, sessions, schema creation"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ..models.base import OrderQueryBase
from .setting import get_settings


def engine_options(
    database_url: str, echo: bool, pool_size: int, max_overflow: int
) -> Dict[str, Any]:
    """Engine keyword arguments for the backend named in ``database_url``."""
    if make_url(database_url).get_backend_name() == "sqlite":
        # aiosqlite has no connection pool to size
        return {"echo": echo, "connect_args": {"timeout": 60}}
    return {
        "echo": echo,
        "pool_size": pool_size,
        "max_overflow": max_overflow,
        "pool_timeout": 45,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
        "connect_args": {"command_timeout": 30},
    }


class OrderQueryDatabaseManager:
    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 20,
        max_overflow: int = 40,
    ) -> None:
        self.database_url = database_url
        self.async_engine = create_async_engine(
            database_url, **engine_options(database_url, echo, pool_size, max_overflow)
        )
        # Loaded entities stay readable after the request session commits
        self.async_session_maker = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_tables(self) -> None:
        """Create the order graph tables that do not exist yet."""
        async with self.async_engine.begin() as conn:
            await conn.run_sync(OrderQueryBase.metadata.create_all, checkfirst=True)

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.async_session_maker() as session:
            yield session

    async def close(self) -> None:
        await self.async_engine.dispose()


settings = get_settings()
database_manager = OrderQueryDatabaseManager(
    database_url=settings.ORDER_QUERY_DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=settings.DATABASE_POOL_SIZE,
    max_overflow=settings.DATABASE_MAX_OVERFLOW,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request, closed when the response is sent"""
    async for session in database_manager.get_async_session():
        yield session
