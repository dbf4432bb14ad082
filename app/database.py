from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.config import get_settings

settings = get_settings()

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=False,
    future=True,
    pool_pre_ping=True,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """Dependency for getting async database session"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def seed_instruments(session: AsyncSession) -> int:
    """Seed the instrument catalog only if the table is empty.

    Returns the number of rows inserted.
    """
    from sqlalchemy import func, select

    from app.models.instrument import InstrumentRecord
    from app.services.catalog import DEFAULT_INSTRUMENTS

    count = await session.scalar(select(func.count()).select_from(InstrumentRecord))
    if count:
        return 0

    for order, instrument in enumerate(DEFAULT_INSTRUMENTS):
        session.add(InstrumentRecord.from_instrument(instrument, sort_order=order))
    await session.commit()
    return len(DEFAULT_INSTRUMENTS)


async def init_db():
    """Initialize database tables"""
    # Import all models to ensure they are registered with Base.metadata
    from app.models import InstrumentRecord, UserSnapshot  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        await seed_instruments(session)


def get_db_session() -> async_sessionmaker[AsyncSession]:
    """Return the async session factory for scripts and background jobs."""
    return AsyncSessionLocal
