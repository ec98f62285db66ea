"""Database connectivity checks used at startup and by the health endpoint."""

import logging

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncEngine

from contact_api.models.base import Base
from contact_api.models.submission_orm import SubmissionORM

logger = logging.getLogger(__name__)


async def check_db_connection(engine: AsyncEngine) -> bool:
    """
    Test database connection.

    Returns:
        bool: True if connection successful, False otherwise.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.warning(f"Database connectivity check failed: {e}")
        return False


async def create_schema(engine: AsyncEngine) -> None:
    """Create the submissions table if it does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def probe_database(engine: AsyncEngine, create_tables: bool = False) -> bool:
    """
    Best-effort startup probe.

    Verifies connectivity, optionally creates the schema and logs the number of
    stored submissions. Never raises: a failing database is only logged and the
    service keeps serving requests.

    Args:
        engine: Engine whose pool should be probed.
        create_tables: Run ``create_all`` before counting rows.

    Returns:
        bool: True if the database answered, False otherwise.
    """
    try:
        if create_tables:
            await create_schema(engine)
        async with engine.connect() as conn:
            result = await conn.execute(select(func.count()).select_from(SubmissionORM))
            count = result.scalar_one()
        logger.info("Database connected successfully")
        logger.info(f"Number of submissions: {count}")
        return True
    except Exception as e:
        logger.error(f"Error connecting to the database: {e}", exc_info=True)
        return False
