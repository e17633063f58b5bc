"""
FastAPI dependencies for the leaderboard API.

Long-lived clients are created in the application lifespan and stored on
``app.state``; these functions hand them to the endpoints so tests can swap
them through ``app.dependency_overrides``.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, Request

from wrapped_leaderboard.core.errors import ServiceUnavailable, Unauthenticated
from wrapped_leaderboard.core.ranking import RankingQuery
from wrapped_leaderboard.core.submission_pipeline import SubmissionPipeline
from wrapped_leaderboard.integrations.supabase import SupabaseAuthClient
from wrapped_leaderboard.models.dtos import Principal

logger = logging.getLogger(__name__)


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        logger.error(f"Application state '{name}' is not initialized")
        raise ServiceUnavailable()
    return value


def get_submission_pipeline(request: Request) -> SubmissionPipeline:
    return _state(request, "submission_pipeline")


def get_identity_verifier(request: Request) -> SupabaseAuthClient:
    return _state(request, "identity_verifier")


def get_ranking_query() -> RankingQuery:
    return RankingQuery()


async def get_current_principal(
    authorization: Optional[str] = Header(None),
    verifier: SupabaseAuthClient = Depends(get_identity_verifier),
) -> Principal:
    """
    Resolve the ``Authorization: Bearer <token>`` header to a verified principal.

    Raises:
        Unauthenticated: If the header is missing or the token is rejected.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthenticated()
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise Unauthenticated()

    principal = await verifier.verify(token)
    if principal is None:
        raise Unauthenticated("Invalid session")
    return principal
