"""
Leaderboard read endpoints.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wrapped_leaderboard.api.dependencies import get_ranking_query
from wrapped_leaderboard.core.ranking import RankingQuery
from wrapped_leaderboard.models.dtos import ErrorResponse, StandingResponse, SubmissionDTO
from wrapped_leaderboard.utils.db_session import get_db_session

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[SubmissionDTO])
async def get_leaderboard(
    ranking: RankingQuery = Depends(get_ranking_query),
    db: AsyncSession = Depends(get_db_session),
) -> List[SubmissionDTO]:
    """
    All submissions ordered by tokens descending, ties by submission time.

    Rank is the 1-based position in this list.
    """
    submissions = await ranking.list(db)
    return [SubmissionDTO.model_validate(submission) for submission in submissions]


@router.get("/{identifier}", response_model=StandingResponse, responses={404: {"model": ErrorResponse}})
async def get_standing(
    identifier: str,
    ranking: RankingQuery = Depends(get_ranking_query),
    db: AsyncSession = Depends(get_db_session),
) -> StandingResponse:
    """
    A single submission with its rank, the board size and a percentile label.

    ``identifier`` is a submission id or the owning user's id.
    """
    standing = await ranking.standing(db, identifier, window=0)
    return StandingResponse(
        submission=SubmissionDTO.model_validate(standing.submission),
        rank=standing.rank,
        total=standing.total,
        percentile=standing.percentile,
    )
