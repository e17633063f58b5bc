"""
Submission pipeline for the leaderboard service.

Runs one submission end to end inside a single request: duplicate check,
vision extraction, validation, screenshot upload, insert, rank. Any failure
aborts the remaining steps, so a record is never written without its
screenshot and a screenshot never produces a partial record. Nothing is
retried; the client resubmits.
"""
import logging
import mimetypes
import re
import secrets
import time
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from wrapped_leaderboard.config.settings import settings
from wrapped_leaderboard.core.errors import (
    DuplicateSubmission,
    InvalidInput,
    MissingInput,
    UploadTooLarge,
)
from wrapped_leaderboard.core.extraction import parse_extraction
from wrapped_leaderboard.core.submission_store import SubmissionStore
from wrapped_leaderboard.models import ExtractedStats, Principal, SubmissionORM

logger = logging.getLogger(__name__)

_SOCIAL_PROFILE_URLS = {
    "github": "https://github.com/{handle}",
    "twitter": "https://x.com/{handle}",
    "x": "https://x.com/{handle}",
}


class VisionClient(Protocol):
    async def extract(self, image_bytes: bytes, mime_type: str) -> str: ...


class ObjectStorage(Protocol):
    async def upload(self, key: str, data: bytes, content_type: str) -> str: ...


@dataclass
class SubmissionOutcome:
    submission: SubmissionORM
    rank: int
    extracted: ExtractedStats


def social_profile(principal: Principal) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Derive (link, handle, provider) display metadata from the principal.

    A link is only built for providers with a known public profile URL.
    """
    handle = principal.user_name
    provider = principal.provider
    template = _SOCIAL_PROFILE_URLS.get((provider or "").lower())
    link = template.format(handle=handle) if template and handle else None
    return link, handle, provider


def screenshot_key(filename: Optional[str], mime_type: str) -> str:
    """
    Collision-resistant storage key: ``<epoch ms>-<random hex>.<ext>``.

    The extension comes from the uploaded filename, else from the MIME type.
    """
    extension = ""
    if filename and "." in filename:
        extension = re.sub(r"[^a-z0-9]", "", filename.rsplit(".", 1)[-1].lower())[:8]
    if not extension:
        guessed = mimetypes.guess_extension(mime_type) or ".png"
        extension = guessed.lstrip(".")
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{extension}"


class SubmissionPipeline:
    """
    Orchestrates a single screenshot submission.
    """

    def __init__(
        self,
        vision: VisionClient,
        storage: ObjectStorage,
        store: Optional[SubmissionStore] = None,
        max_upload_bytes: int = settings.MAX_UPLOAD_BYTES,
        max_name_length: int = settings.MAX_NAME_LENGTH,
    ):
        self.vision = vision
        self.storage = storage
        self.store = store or SubmissionStore()
        self.max_upload_bytes = max_upload_bytes
        self.max_name_length = max_name_length

    def _validate_input(self, display_name: Optional[str], image_bytes: Optional[bytes], mime_type: Optional[str]) -> str:
        name = (display_name or "").strip()
        if not name or not image_bytes:
            raise MissingInput()
        if len(name) > self.max_name_length:
            raise InvalidInput(f"Name must be at most {self.max_name_length} characters")
        if len(image_bytes) > self.max_upload_bytes:
            raise UploadTooLarge(details={"size": len(image_bytes), "max_size": self.max_upload_bytes})
        if not (mime_type or "").lower().startswith("image/"):
            raise InvalidInput("Screenshot must be an image")
        return name

    async def submit(
        self,
        principal: Principal,
        display_name: Optional[str],
        image_bytes: Optional[bytes],
        mime_type: Optional[str],
        db_session: AsyncSession,
        filename: Optional[str] = None,
    ) -> SubmissionOutcome:
        """
        Run one submission.

        Args:
            principal: Verified identity submitting the stats.
            display_name: Name shown on the leaderboard.
            image_bytes: Screenshot content.
            mime_type: Screenshot MIME type.
            db_session: Session used for the duplicate check, the insert and the rank count.
            filename: Original upload filename, used for the stored object's extension.

        Returns:
            SubmissionOutcome: The stored record, its rank and the normalized stats.

        Raises:
            LeaderboardError: A subclass naming the step that failed.
        """
        name = self._validate_input(display_name, image_bytes, mime_type)
        mime_type = mime_type.lower()
        logger.info(f"Starting submission for user {principal.id}")

        # 1. One submission per user. The unique constraint backs this up under races.
        duplicate = await self.store.exists_for_user(db_session, principal.id)
        # Release the pooled connection before the slow external calls.
        await db_session.rollback()
        if duplicate:
            logger.info(f"User {principal.id} already has a submission")
            raise DuplicateSubmission()

        # 2-3. Vision extraction and validation
        content = await self.vision.extract(image_bytes, mime_type)
        extracted = parse_extraction(content)
        logger.info(f"User {principal.id}: extracted tokens={extracted.tokens}")

        # 4. Durable screenshot before any row exists
        key = screenshot_key(filename, mime_type)
        screenshot_url = await self.storage.upload(key, image_bytes, mime_type)

        # 5. Display metadata from the identity provider
        social_link, social_handle, social_provider = social_profile(principal)

        # 6. Insert. An orphaned screenshot is acceptable if this fails.
        submission = SubmissionORM(
            user_id=principal.id,
            name=name,
            email=principal.email,
            screenshot_url=screenshot_url,
            tokens=extracted.tokens,
            agents=extracted.agents,
            tabs=extracted.tabs,
            streak=extracted.streak,
            usage_percentile=extracted.usage_percentile,
            top_models=extracted.top_models,
            joined_days_ago=extracted.joined_days_ago,
            social_link=social_link,
            social_handle=social_handle,
            social_provider=social_provider,
        )
        submission = await self.store.insert(db_session, submission)

        # 7. Rank = 1 + number of strictly greater token counts
        rank = await self.store.count_greater(db_session, submission.tokens) + 1
        logger.info(f"Submission {submission.id} for user {principal.id} ranked #{rank}")
        return SubmissionOutcome(submission=submission, rank=rank, extracted=extracted)
