# billmate/core/database.py
from typing import AsyncIterator
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from billmate.core.config import settings

database_url = settings.DATABASE_URL

engine = create_async_engine(
    database_url,
    echo=settings.DATABASE_ECHO,
    future=True,
    # aiosqlite hands the connection across threads
    connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
)

async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        yield session

def get_session_factory() -> async_sessionmaker:
    """Factory for work that needs sessions of its own, like the alert checks"""
    return async_session_maker
