"""
Share preview image endpoint.
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from wrapped_leaderboard.api.dependencies import get_ranking_query
from wrapped_leaderboard.config.settings import settings
from wrapped_leaderboard.core.preview_renderer import render_preview
from wrapped_leaderboard.core.ranking import RankingQuery
from wrapped_leaderboard.models.dtos import ErrorResponse
from wrapped_leaderboard.utils.db_session import get_db_session

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/{identifier}",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}, 404: {"model": ErrorResponse}},
)
async def get_preview(
    identifier: str,
    ranking: RankingQuery = Depends(get_ranking_query),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    """Square PNG showing the submission's rank, stats and nearby ranks."""
    standing = await ranking.standing(db, identifier, window=settings.PREVIEW_NEIGHBOUR_WINDOW)
    # Pillow drawing is CPU-bound
    image = await run_in_threadpool(
        render_preview, standing, settings.PUBLIC_SITE_LABEL, settings.PREVIEW_SIZE
    )
    return Response(
        content=image,
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=300"},
    )
