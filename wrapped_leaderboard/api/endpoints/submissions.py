"""
Submission endpoints.

``POST /api/submit`` runs the submission pipeline for the signed-in user.
``POST /api/submit/draft`` turns a pending upload into a signed token the
client can hold while it completes sign-in. The token is sent back as a file
part named ``draft``: it is larger than the screenshot it carries, and plain
multipart fields are capped well below ``MAX_UPLOAD_BYTES``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from wrapped_leaderboard.api.dependencies import get_current_principal, get_submission_pipeline
from wrapped_leaderboard.config.settings import settings
from wrapped_leaderboard.core.drafts import decode_draft, encode_draft, max_token_length
from wrapped_leaderboard.core.errors import InvalidDraft, InvalidInput, MissingInput, UploadTooLarge
from wrapped_leaderboard.core.submission_pipeline import SubmissionPipeline
from wrapped_leaderboard.models.dtos import DraftResponse, ErrorResponse, Principal, SubmitResponse
from wrapped_leaderboard.utils.db_session import get_db_session

router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 401, 409, 413, 500, 503)
}


async def read_upload(upload: UploadFile, limit: Optional[int] = None) -> bytes:
    """
    Read an uploaded file, refusing anything above ``limit`` bytes.

    ``limit`` defaults to ``MAX_UPLOAD_BYTES``. Reads one byte past the limit
    so oversized uploads are detected without buffering the whole body.
    """
    limit = settings.MAX_UPLOAD_BYTES if limit is None else limit
    data = await upload.read(limit + 1)
    if len(data) > limit:
        raise UploadTooLarge(details={"filename": upload.filename})
    return data


async def read_draft(upload: UploadFile) -> str:
    raw = await read_upload(upload, max_token_length(settings.MAX_UPLOAD_BYTES))
    try:
        return raw.decode("ascii")
    except UnicodeDecodeError as e:
        raise InvalidDraft(details={"reason": str(e)}) from e


@router.post("", response_model=SubmitResponse, responses=ERROR_RESPONSES)
async def submit(
    name: Optional[str] = Form(None),
    screenshot: Optional[UploadFile] = File(None),
    draft: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    pipeline: SubmissionPipeline = Depends(get_submission_pipeline),
    db: AsyncSession = Depends(get_db_session),
) -> SubmitResponse:
    """
    Submit a stats screenshot for the authenticated user.

    Accepts either ``name`` plus ``screenshot``, or a ``draft`` file part
    holding the token issued by ``POST /api/submit/draft``.

    Raises:
        LeaderboardError: Mapped to a JSON error response by the app.
    """
    if draft is not None:
        token = await read_draft(draft)
        pending = decode_draft(token, settings.DRAFT_SECRET_KEY, settings.DRAFT_MAX_AGE_SECONDS)
        display_name = pending.name
        image_bytes = pending.image_bytes
        mime_type = pending.mime_type
        filename = pending.filename
    else:
        if screenshot is None:
            raise MissingInput()
        display_name = name
        image_bytes = await read_upload(screenshot)
        mime_type = screenshot.content_type or "image/png"
        filename = screenshot.filename

    outcome = await pipeline.submit(
        principal=principal,
        display_name=display_name,
        image_bytes=image_bytes,
        mime_type=mime_type,
        db_session=db,
        filename=filename,
    )
    return SubmitResponse(
        rank=outcome.rank,
        id=outcome.submission.id,
        user_id=outcome.submission.user_id,
        extracted=outcome.extracted,
    )


@router.post("/draft", response_model=DraftResponse, responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}})
async def create_draft(
    name: Optional[str] = Form(None),
    screenshot: Optional[UploadFile] = File(None),
) -> DraftResponse:
    """
    Stash a pending upload in a signed, client-held token.

    Only shape checks happen here; the full validation runs when the draft is
    submitted.
    """
    display_name = (name or "").strip()
    if not display_name or screenshot is None:
        raise MissingInput()
    if len(display_name) > settings.MAX_NAME_LENGTH:
        raise InvalidInput(f"Name must be at most {settings.MAX_NAME_LENGTH} characters")
    image_bytes = await read_upload(screenshot)
    if not image_bytes:
        raise MissingInput()

    token = encode_draft(
        name=display_name,
        image_bytes=image_bytes,
        mime_type=screenshot.content_type or "image/png",
        secret=settings.DRAFT_SECRET_KEY,
        # Only the extension is ever used
        filename=screenshot.filename[-100:] if screenshot.filename else None,
    )
    logger.info(f"Issued submission draft ({len(image_bytes)} bytes)")
    return DraftResponse(draft=token)
