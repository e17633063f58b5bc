"""
Core components for the Wrapped Leaderboard service.
"""

from .ranking import RankingQuery, Standing
from .submission_pipeline import SubmissionOutcome, SubmissionPipeline
from .submission_store import SubmissionStore

__all__ = [
    "RankingQuery",
    "Standing",
    "SubmissionOutcome",
    "SubmissionPipeline",
    "SubmissionStore",
]
