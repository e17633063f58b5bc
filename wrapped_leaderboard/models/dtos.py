"""
Pydantic Data Transfer Objects (DTOs) for the leaderboard service.

These models are used for API request/response validation and internal data transfer.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator


class Principal(BaseModel):
    """
    An already-verified identity handed to the core by the identity collaborator.

    Only ``id`` is trusted for ownership; the rest is display metadata.
    """
    id: str
    email: Optional[str] = None
    provider: Optional[str] = None  # e.g. 'github', 'twitter'
    user_name: Optional[str] = None


class ExtractedStats(BaseModel):
    """
    Normalized stats read from a screenshot.

    ``tokens`` is always present (0 when unreadable). Every other numeric
    field is None when the value was not visible, which is distinct from 0.
    """
    tokens: int = 0
    agents: Optional[int] = None
    tabs: Optional[int] = None
    streak: Optional[int] = None
    usage_percentile: Optional[str] = None
    top_models: Optional[List[str]] = None
    joined_days_ago: Optional[int] = None

    @field_serializer("tokens")
    def serialize_tokens(self, tokens: int) -> str:
        # Token counts exceed the safe integer range of JSON consumers.
        return str(tokens)


class SubmissionDTO(BaseModel):
    """
    Public view of a stored submission.

    Mirrors SubmissionORM minus the private email column.
    """
    id: str
    user_id: str
    name: str
    tokens: str
    agents: Optional[int] = None
    tabs: Optional[int] = None
    streak: Optional[int] = None
    usage_percentile: Optional[str] = None
    top_models: Optional[List[str]] = None
    joined_days_ago: Optional[int] = None
    screenshot_url: Optional[str] = None
    social_link: Optional[str] = None
    social_handle: Optional[str] = None
    social_provider: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @field_validator("tokens", mode="before")
    @classmethod
    def tokens_as_string(cls, value: Any) -> str:
        return str(int(value))


class SubmitResponse(BaseModel):
    """Response body of a successful submission."""
    success: bool = True
    rank: int
    id: str
    user_id: str
    extracted: ExtractedStats


class StandingResponse(BaseModel):
    """A single submission with its derived position on the board."""
    submission: SubmissionDTO
    rank: int
    total: int
    percentile: str


class DraftResponse(BaseModel):
    """Opaque pending-submission token held by the client."""
    draft: str


class SubmissionDraft(BaseModel):
    """
    A pending upload serialized into a client-held draft token.
    """
    name: str
    filename: Optional[str] = None
    mime_type: str = "image/png"
    image_bytes: bytes = Field(..., repr=False)
    issued_at: int


class ErrorResponse(BaseModel):
    """Error body returned for every failed request."""
    error: str
    code: str
