# rollcall/database.py
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from rollcall.config import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def _connect_args(db_url: str, timeout: float) -> dict:
    # Statement timeouts belong to the driver, not to the store
    if db_url.startswith("sqlite"):
        return {"timeout": timeout}
    if "+asyncpg" in db_url:
        return {"command_timeout": timeout}
    return {}


def build_engine(settings: Settings) -> AsyncEngine:
    db_url = settings.effective_database_url
    return create_async_engine(
        db_url,
        echo=settings.SQL_ECHO,
        connect_args=_connect_args(db_url, settings.DB_TIMEOUT_SECONDS),
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


async def init_models(engine: AsyncEngine) -> None:
    """Create missing tables (demo mode; use Alembic in prod)."""
    # Model modules register themselves on Base.metadata when imported
    from rollcall.models import attendance, crt, staff  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")
