"""
Ranking query: the read path of the leaderboard.

Rank is never stored. It is derived on every read from the full set ordered
by token count descending, ties in insertion order.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from wrapped_leaderboard.core.errors import RecordNotFound
from wrapped_leaderboard.core.formatting import percentile_label
from wrapped_leaderboard.core.submission_store import SubmissionStore
from wrapped_leaderboard.models import SubmissionORM

logger = logging.getLogger(__name__)


@dataclass
class Standing:
    """A submission's position on the board plus the ranks around it."""
    submission: SubmissionORM
    rank: int
    total: int
    percentile: str
    # (rank, submission) pairs for nearby entries, excluding ``submission`` itself.
    neighbours: List[Tuple[int, SubmissionORM]] = field(default_factory=list)


class RankingQuery:
    """
    Lists submissions in rank order and locates a single submission in that order.
    """

    def __init__(self, store: Optional[SubmissionStore] = None):
        self.store = store or SubmissionStore()

    async def list(self, db_session: AsyncSession) -> List[SubmissionORM]:
        submissions = await self.store.list_ordered(db_session)
        logger.info(f"Retrieved {len(submissions)} leaderboard entries")
        return submissions

    @staticmethod
    def _position(submissions: List[SubmissionORM], identifier: str) -> int:
        for index, submission in enumerate(submissions):
            if submission.id == identifier:
                return index
        for index, submission in enumerate(submissions):
            if submission.user_id == identifier:
                return index
        raise RecordNotFound(details={"identifier": identifier})

    async def rank_of(self, db_session: AsyncSession, identifier: str) -> int:
        """
        1-based position of a submission within ``list()``.

        Args:
            identifier: Submission id, or the owning user's id.

        Raises:
            RecordNotFound: If no submission matches.
        """
        submissions = await self.list(db_session)
        return self._position(submissions, identifier) + 1

    async def standing(self, db_session: AsyncSession, identifier: str, window: int = 3) -> Standing:
        """
        Position of a submission with up to ``window`` entries above and below it.

        Raises:
            RecordNotFound: If no submission matches.
        """
        submissions = await self.list(db_session)
        index = self._position(submissions, identifier)
        rank = index + 1
        total = len(submissions)

        start = max(0, index - window)
        end = min(total, index + window + 1)
        neighbours = [
            (position + 1, submissions[position])
            for position in range(start, end)
            if position != index
        ]
        return Standing(
            submission=submissions[index],
            rank=rank,
            total=total,
            percentile=percentile_label(rank, total),
            neighbours=neighbours,
        )
