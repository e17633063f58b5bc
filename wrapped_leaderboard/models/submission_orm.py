"""
SQLAlchemy ORM model for the 'submissions' table.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Index, Integer, Text, JSON, UniqueConstraint
from sqlalchemy import TIMESTAMP
from sqlalchemy.sql import func

from .base import Base
from .types import TokenCount


def _new_submission_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionORM(Base):
    """
    SQLAlchemy ORM model representing one user's leaderboard entry.

    Attributes:
        id (str): Opaque unique identifier (UUID4 string).
        user_id (str): Identifier of the owning principal. Unique: one submission per user.
        name (str): Display name supplied by the user.
        email (str, optional): Principal's email, kept private.
        tokens (int): Primary ranking metric, exact non-negative integer.
        agents (int, optional): Agent count; NULL when not visible in the screenshot.
        tabs (int, optional): Tab completion count; NULL when not visible.
        streak (int, optional): Streak in days; NULL when not visible.
        usage_percentile (str, optional): Free-text label such as "Top 5%".
        top_models (list[str], optional): Model names, most used first.
        joined_days_ago (int, optional): Account age in days.
        screenshot_url (str, optional): Public URL of the uploaded screenshot.
        social_link (str, optional): Profile URL derived from the identity provider.
        social_handle (str, optional): Handle on the identity provider.
        social_provider (str, optional): Identity provider name (e.g. "github").
        created_at (datetime): Creation timestamp.
    """
    __tablename__ = "submissions"

    id = Column(Text, primary_key=True, default=_new_submission_id, comment="Opaque submission identifier.")
    user_id = Column(Text, nullable=False, comment="Owning principal. Unique per table.")
    name = Column(Text, nullable=False, comment="Display name, user supplied.")
    email = Column(Text, nullable=True, comment="Principal email. Never exposed publicly.")
    tokens = Column(TokenCount(), nullable=False, default=0, comment="Primary ranking metric.")
    agents = Column(Integer, nullable=True, comment="Agent count, NULL when unknown.")
    tabs = Column(Integer, nullable=True, comment="Tab count, NULL when unknown.")
    streak = Column(Integer, nullable=True, comment="Streak in days, NULL when unknown.")
    usage_percentile = Column(Text, nullable=True, comment="Usage percentile label as printed on the screenshot.")
    top_models = Column(JSON, nullable=True, comment="Ordered list of model names.")
    joined_days_ago = Column(Integer, nullable=True, comment="Days since the account was created.")
    screenshot_url = Column(Text, nullable=True, comment="Public URL of the uploaded screenshot.")
    social_link = Column(Text, nullable=True, comment="Profile link from the identity provider.")
    social_handle = Column(Text, nullable=True, comment="Handle on the identity provider.")
    social_provider = Column(Text, nullable=True, comment="Identity provider name.")
    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        comment="Creation timestamp.",
    )

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_submissions_user_id"),
        Index("idx_submissions_tokens", "tokens"),
    )

    def __repr__(self) -> str:
        return (
            f"<SubmissionORM(id='{self.id}', user_id='{self.user_id}', "
            f"name='{self.name}', tokens={self.tokens})>"
        )
