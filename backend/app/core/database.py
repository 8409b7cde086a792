import uuid

import asyncpg
from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings

CART_SCHEMA = "customer"


class UniqueStatementConnection(asyncpg.Connection):
    """Prepared statement names unique per connection, safe behind pgBouncer."""

    def _get_unique_id(self, prefix: str) -> str:
        return f"__asyncpg_{prefix}_{uuid.uuid4()}__"


def to_async_url(url: str) -> str:
    """Point postgres:// and postgresql:// URLs at the asyncpg driver."""
    for scheme in ("postgresql://", "postgres://"):
        if url.startswith(scheme):
            return "postgresql+asyncpg://" + url[len(scheme):]
    return url


engine = create_async_engine(
    to_async_url(settings.database_url),
    echo=False,
    pool_size=5,
    max_overflow=5,
    pool_recycle=300,
    pool_pre_ping=True,
    connect_args={
        "statement_cache_size": 0,
        "connection_class": UniqueStatementConnection,
    },
)
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    metadata = MetaData(schema=CART_SCHEMA)


async def get_db():
    async with async_session_factory() as session:
        yield session
