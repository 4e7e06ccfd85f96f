from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.ext.asyncio.session import AsyncSession
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from grocery_pos.core.config import settings

DB_URL = settings.DB_URL

Base = declarative_base()


def build_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:")):
        # a single shared connection, otherwise every checkout sees an empty database
        return create_async_engine(
            url,
            future=True,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(url, future=True, echo=False)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine(DB_URL)


async def create_tables(bind: AsyncEngine) -> None:
    # register every model on Base.metadata
    from grocery_pos.db import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
