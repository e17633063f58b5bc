"""
Models package for the leaderboard service.

This package contains SQLAlchemy ORM models and Pydantic DTOs.
"""

# Ensure all ORM models are registered with the Base metadata when this package is imported.
from . import base
from . import submission_orm

from .base import Base
from .submission_orm import SubmissionORM
from .types import TokenCount

from .dtos import (
    DraftResponse,
    ErrorResponse,
    ExtractedStats,
    Principal,
    StandingResponse,
    SubmissionDraft,
    SubmissionDTO,
    SubmitResponse,
)

__all__ = [
    # Base
    "Base",
    # ORMs
    "SubmissionORM",
    "TokenCount",
    # DTOs
    "DraftResponse",
    "ErrorResponse",
    "ExtractedStats",
    "Principal",
    "StandingResponse",
    "SubmissionDraft",
    "SubmissionDTO",
    "SubmitResponse",
]
