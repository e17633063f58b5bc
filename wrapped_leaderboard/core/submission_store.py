"""
Persistence for leaderboard submissions.

All queries take the caller's ``AsyncSession``; transaction boundaries belong
to the caller. The one-submission-per-user rule is enforced by the
``uq_submissions_user_id`` constraint, and a violation surfaces here as
``SubmissionConflict``.
"""
import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wrapped_leaderboard.core.errors import (
    LeaderboardQueryFailed,
    RecordInsertFailed,
    SubmissionConflict,
)
from wrapped_leaderboard.models import SubmissionORM

logger = logging.getLogger(__name__)


class SubmissionStore:
    """
    Async repository over the ``submissions`` table.
    """

    @staticmethod
    def ranking_order():
        """Primary metric descending, then insertion order."""
        return (
            SubmissionORM.tokens.desc(),
            SubmissionORM.created_at.asc(),
            SubmissionORM.id.asc(),
        )

    async def exists_for_user(self, db_session: AsyncSession, user_id: str) -> bool:
        try:
            result = await db_session.execute(
                select(SubmissionORM.id).where(SubmissionORM.user_id == user_id).limit(1)
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error checking existing submission for user {user_id}: {e}", exc_info=True)
            raise LeaderboardQueryFailed("Failed to check existing submission") from e
        return result.scalar_one_or_none() is not None

    async def insert(self, db_session: AsyncSession, submission: SubmissionORM) -> SubmissionORM:
        """
        Insert and commit a new submission.

        Raises:
            SubmissionConflict: If the user already owns a submission (unique constraint).
            RecordInsertFailed: On any other database error.
        """
        try:
            db_session.add(submission)
            await db_session.commit()
            await db_session.refresh(submission)
        except IntegrityError as e:
            await db_session.rollback()
            logger.warning(f"Unique constraint rejected submission for user {submission.user_id}: {e.orig}")
            raise SubmissionConflict(details={"user_id": submission.user_id}) from e
        except (SQLAlchemyError, OverflowError) as e:
            # OverflowError comes straight from drivers that bind Python ints natively (sqlite3)
            await db_session.rollback()
            logger.error(f"Database error saving submission for user {submission.user_id}: {e}", exc_info=True)
            raise RecordInsertFailed(details={"user_id": submission.user_id}) from e

        logger.info(f"Saved submission {submission.id} for user {submission.user_id}")
        return submission

    async def count_greater(self, db_session: AsyncSession, tokens: int) -> int:
        """Number of submissions whose token count is strictly greater than ``tokens``."""
        try:
            result = await db_session.execute(
                select(func.count()).select_from(SubmissionORM).where(SubmissionORM.tokens > tokens)
            )
        except SQLAlchemyError as e:
            logger.error(f"Database error counting submissions above {tokens}: {e}", exc_info=True)
            raise LeaderboardQueryFailed() from e
        return int(result.scalar_one())

    async def list_ordered(self, db_session: AsyncSession) -> List[SubmissionORM]:
        try:
            result = await db_session.execute(select(SubmissionORM).order_by(*self.ranking_order()))
        except SQLAlchemyError as e:
            logger.error(f"Database error listing submissions: {e}", exc_info=True)
            raise LeaderboardQueryFailed() from e
        return list(result.scalars().all())

