"""
Client-held submission drafts.

When a visitor picks a screenshot before signing in, the pending upload has to
survive the identity provider redirect. The service keeps no session state,
so the draft is handed to the client as an opaque signed token and sent back
with the authenticated submit request.

Token format: ``<meta>.<image>.<signature>``, each segment base64url without
padding. ``meta`` is a small JSON object (name, filename, MIME type, issue
time), ``image`` is the raw screenshot, and ``signature`` is HMAC-SHA256 over
the metadata bytes followed by the image bytes. The image is encoded exactly
once, so a token is about 4/3 the size of the screenshot.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Optional

from pydantic import ValidationError

from wrapped_leaderboard.core.errors import InvalidDraft
from wrapped_leaderboard.models.dtos import SubmissionDraft

# Room for the metadata segment, the signature and the separators.
_TOKEN_OVERHEAD = 4096


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def _sign(meta: bytes, image_bytes: bytes, secret: str) -> bytes:
    mac = hmac.new(secret.encode(), meta, hashlib.sha256)
    mac.update(b"\x00")
    mac.update(image_bytes)
    return mac.digest()


def max_token_length(max_image_bytes: int) -> int:
    """Upper bound on the length of a token carrying an image of ``max_image_bytes``."""
    return 4 * ((max_image_bytes + 2) // 3) + _TOKEN_OVERHEAD


def encode_draft(
    name: str,
    image_bytes: bytes,
    mime_type: str,
    secret: str,
    filename: Optional[str] = None,
    issued_at: Optional[int] = None,
) -> str:
    """
    Serialize a pending upload into a signed token.

    Returns:
        str: Opaque token to hand to the client.
    """
    meta = json.dumps(
        {
            "name": name,
            "filename": filename,
            "mime_type": mime_type,
            "issued_at": int(time.time()) if issued_at is None else issued_at,
        },
        separators=(",", ":"),
    ).encode()
    signature = _sign(meta, image_bytes, secret)
    return f"{_b64encode(meta)}.{_b64encode(image_bytes)}.{_b64encode(signature)}"


def decode_draft(token: str, secret: str, max_age_seconds: int) -> SubmissionDraft:
    """
    Verify and decode a draft token.

    Raises:
        InvalidDraft: If the token is malformed, tampered with, or older than ``max_age_seconds``.
    """
    segments = token.strip().split(".")
    if len(segments) != 3 or not all(segments):
        raise InvalidDraft()

    try:
        meta, image_bytes, signature = (_b64decode(segment) for segment in segments)
    except (ValueError, binascii.Error) as e:
        raise InvalidDraft(details={"reason": str(e)}) from e
    if not hmac.compare_digest(signature, _sign(meta, image_bytes, secret)):
        raise InvalidDraft()

    try:
        body = json.loads(meta)
        draft = SubmissionDraft(
            name=body["name"],
            filename=body.get("filename"),
            mime_type=body["mime_type"],
            image_bytes=image_bytes,
            issued_at=body["issued_at"],
        )
    except (ValueError, KeyError, TypeError, ValidationError) as e:
        raise InvalidDraft(details={"reason": str(e)}) from e

    if time.time() - draft.issued_at > max_age_seconds:
        raise InvalidDraft("Pending submission expired, please upload again")
    return draft
