from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def make_engine(url: str, **options) -> AsyncEngine:
    """Async engine for the school database.

    Connections are pinged before use and recycled after five minutes. Extra
    options (e.g. a poolclass for an in-memory database) override these.
    """
    kwargs = {"pool_pre_ping": True, "pool_recycle": 300}
    kwargs.update(options)
    return create_async_engine(url, **kwargs)


engine = make_engine(settings.database_url)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; closed when the response is sent."""
    async with AsyncSessionLocal() as session:
        yield session
