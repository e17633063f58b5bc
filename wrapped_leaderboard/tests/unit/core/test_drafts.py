import time

import pytest

from wrapped_leaderboard.core.drafts import decode_draft, encode_draft, max_token_length
from wrapped_leaderboard.core.errors import InvalidDraft

SECRET = "test-secret"
IMAGE = b"\x89PNG\r\n\x1a\nfake-image"


def test_encode_decode():
    token = encode_draft("Ada", IMAGE, "image/png", SECRET, filename="wrapped.png")

    draft = decode_draft(token, SECRET, max_age_seconds=60)

    assert draft.name == "Ada"
    assert draft.image_bytes == IMAGE
    assert draft.mime_type == "image/png"
    assert draft.filename == "wrapped.png"


def test_token_is_url_safe():
    token = encode_draft("Ada", IMAGE * 50, "image/png", SECRET)
    assert all(ch.isalnum() or ch in "-_." for ch in token)


def test_image_is_encoded_once():
    image = bytes(range(256)) * 4000
    token = encode_draft("Ada", image, "image/png", SECRET, filename="wrapped.png")

    assert len(token) < len(image) * 4 / 3 + 512
    assert len(token) <= max_token_length(len(image))


def test_wrong_secret_rejected():
    token = encode_draft("Ada", IMAGE, "image/png", SECRET)
    with pytest.raises(InvalidDraft):
        decode_draft(token, "other-secret", max_age_seconds=60)


def test_tampered_metadata_rejected():
    _, image, signature = encode_draft("Ada", IMAGE, "image/png", SECRET).split(".")
    forged = encode_draft("Mallory", IMAGE, "image/png", "attacker").split(".")[0]
    with pytest.raises(InvalidDraft):
        decode_draft(f"{forged}.{image}.{signature}", SECRET, max_age_seconds=60)


def test_swapped_image_rejected():
    meta, _, signature = encode_draft("Ada", IMAGE, "image/png", SECRET).split(".")
    other_image = encode_draft("Ada", b"other", "image/png", SECRET).split(".")[1]
    with pytest.raises(InvalidDraft):
        decode_draft(f"{meta}.{other_image}.{signature}", SECRET, max_age_seconds=60)


def test_expired_draft_rejected():
    token = encode_draft("Ada", IMAGE, "image/png", SECRET, issued_at=int(time.time()) - 120)
    with pytest.raises(InvalidDraft) as exc_info:
        decode_draft(token, SECRET, max_age_seconds=60)
    assert "expired" in exc_info.value.message


@pytest.mark.parametrize(
    "token", ["", "no-dot", ".img.sig", "meta..sig", "meta.img.", "a.b", "a.b.c.d", "ünïcode.img.sig"]
)
def test_malformed_tokens_rejected(token):
    with pytest.raises(InvalidDraft):
        decode_draft(token, SECRET, max_age_seconds=60)
