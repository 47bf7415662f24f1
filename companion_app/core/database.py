from sqlalchemy.ext.asyncio import create_async_engine,async_sessionmaker,AsyncSession
from sqlalchemy.orm import declarative_base
from sqlalchemy import text
from companion_app.core.config import settings
from loguru import logger
import asyncio
from typing import AsyncGenerator

Base=declarative_base()

async_engine=None
AsyncSessionLocal=None

def _engine_options() -> dict:
    # sqlite drivers use a static/null pool and reject the sizing arguments
    if settings.DATABASE_URL.startswith("sqlite"):
        return {"echo": settings.DATABASE_ECHO_SQL}
    return {
        "echo": settings.DATABASE_ECHO_SQL,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
        "pool_pre_ping": True,
    }

async def init_db(max_retries:int=10,retry_delay:int=5):
    """
    Initializes the database engine and session factory and creates the
    tables if they don't exist. Retries while the database comes up.
    """
    global async_engine,AsyncSessionLocal
    if async_engine is not None:
        logger.info("Database engine already initialized.")
        return

    # Registers every mapped table on Base.metadata before create_all
    from companion_app.models import category, companion, message  # noqa: F401

    for i in range(max_retries):
        try:
            async_engine = create_async_engine(settings.DATABASE_URL, **_engine_options())

            async with async_engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                await conn.run_sync(Base.metadata.create_all)

            AsyncSessionLocal = async_sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=async_engine,
                class_=AsyncSession,
                expire_on_commit=False # Prevents objects from expiring after commit
            )

            logger.info("Database tables initialized successfully (or already existed).")
            break

        except Exception as e:
            logger.error(f"Failed to connect to database or create tables (Attempt {i+1}/{max_retries}): {e}")
            if async_engine is not None:
                await async_engine.dispose()
                async_engine = None
            if i < max_retries - 1:
                logger.info(f"Retrying database connection in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
            else:
                logger.critical("Maximum database connection retries reached. Exiting startup.")
                raise

def get_session_factory() -> async_sessionmaker:
    """Dependency that provides the session factory, for work that outlives a request."""
    if AsyncSessionLocal is None:
        raise RuntimeError("Database session local could not be initialized.")
    return AsyncSessionLocal

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides an asynchronous database session.
    It ensures the session is closed after the request.
    """
    if AsyncSessionLocal is None:
        logger.error("AsyncSessionLocal is not initialized. Calling init_db...")
        await init_db()
        if AsyncSessionLocal is None:
            raise RuntimeError("Database session local could not be initialized.")

    db = AsyncSessionLocal()
    try:
        yield db
    finally:
        await db.close()


async def dispose_db():
    """Disposes the database engine connections."""
    global async_engine,AsyncSessionLocal
    if async_engine:
        await async_engine.dispose()
        logger.info("Database engine connections disposed.")
    async_engine=None
    AsyncSessionLocal=None
