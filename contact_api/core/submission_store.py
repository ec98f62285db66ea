"""
Submission Store for the Contact Form API.

Persists contact-form submissions to the relational ``submissions`` table and
lists them back, newest first. Every call runs in its own short-lived session
and commits immediately.
"""
import asyncio
import logging
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from contact_api.core.errors import StoreError
from contact_api.models import SubmissionORM
from contact_api.models.dtos import SubmissionDTO

logger = logging.getLogger(__name__)

# asyncio.TimeoutError is not an OSError before Python 3.11
DATABASE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError)


class SubmissionStore:
    """
    Inserts and lists submission rows.
    """
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initializes the SubmissionStore.

        Args:
            session_factory: Factory producing sessions bound to the shared connection pool.
        """
        self._session_factory = session_factory

    async def insert(
        self,
        name: str,
        email: str,
        message: str,
        image_url: Optional[str] = None,
    ) -> int:
        """
        Inserts a new submission row.

        Args:
            name: Sender name.
            email: Sender email.
            message: Message body.
            image_url: Public URL of the attached image, or None.

        Returns:
            The id assigned by the database.

        Raises:
            StoreError: On connectivity problems or a failed statement.
        """
        submission = SubmissionORM(
            name=name,
            email=email,
            message=message,
            image_url=image_url,
        )
        try:
            async with self._session_factory() as session:
                session.add(submission)
                await session.commit()
                submission_id = submission.id
        except DATABASE_ERRORS as e:
            logger.error(f"Failed to insert submission for {email}: {e}")
            raise StoreError(str(e) or type(e).__name__) from e

        logger.info(f"Stored submission {submission_id} (image: {image_url is not None})")
        return submission_id

    async def list_all(self) -> List[SubmissionDTO]:
        """
        Fetches every submission, most recent first.

        Rows sharing a created_at timestamp are ordered by descending id.

        Returns:
            List of SubmissionDTO.

        Raises:
            StoreError: On connectivity problems or a failed statement.
        """
        stmt = select(SubmissionORM).order_by(
            desc(SubmissionORM.created_at), desc(SubmissionORM.id)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
                submissions = [SubmissionDTO.model_validate(row) for row in rows]
        except DATABASE_ERRORS as e:
            logger.error(f"Failed to list submissions: {e}")
            raise StoreError(str(e) or type(e).__name__) from e

        logger.debug(f"Fetched {len(submissions)} submissions")
        return submissions
