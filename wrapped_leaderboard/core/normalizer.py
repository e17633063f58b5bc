"""
Numeric normalizer for stats read off a screenshot.

Turns human-readable magnitudes ("6.60B", "17K", "1,234", "56d") into
integers. Token counts are ranked and can be far above 2**53, so all
arithmetic here is done on Python integers digit by digit; nothing passes
through ``float``.

None of these functions raise. A value that cannot be read degrades to the
defined fallback: ``0`` for token counts, ``None`` ("not visible") for every
other field. Values too large for their column degrade the same way, so one
absurd reading never fails the insert of an otherwise valid submission.
"""

import logging
import math
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

_SUFFIX_EXPONENTS = {"": 0, "K": 3, "M": 6, "B": 9}
# Stays well under the interpreter's int/str conversion limit.
_MAX_INPUT_LENGTH = 64

# Largest value a NUMERIC(39, 0) tokens column holds.
MAX_TOKENS = 10 ** 39 - 1
# agents, tabs, streak and joined_days_ago are 32-bit INTEGER columns.
MAX_COUNT = 2_147_483_647


def _bounded(value: Optional[int], limit: int) -> Optional[int]:
    if value is not None and value > limit:
        logger.debug(f"Value {value} exceeds column limit {limit}; discarding")
        return None
    return value

_MAGNITUDE_RE = re.compile(r"^(?P<whole>\d*)(?:\.(?P<frac>\d*))?(?P<suffix>[KMB]?)$")
_DAY_UNIT_RE = re.compile(r"(?:DAYS?|D)$")
_DAYS_PHRASE_RE = re.compile(r"(?<!\d)(\d{1,9})\s*days?", re.IGNORECASE)


def _clean(value: str) -> str:
    return re.sub(r"[,\s]", "", value).upper()


def _magnitude(cleaned: str) -> Optional[int]:
    """Floor of ``<mantissa><suffix>`` as an int, or None if it does not match."""
    if len(cleaned) > _MAX_INPUT_LENGTH:
        return None
    match = _MAGNITUDE_RE.match(cleaned)
    if not match:
        return None
    whole = match.group("whole") or ""
    frac = match.group("frac") or ""
    if not whole and not frac:
        return None

    exponent = _SUFFIX_EXPONENTS[match.group("suffix")]
    # Keep only the fraction digits the suffix shifts into the integer part; the rest is floored away.
    shifted = frac[:exponent].ljust(exponent, "0")
    return int(whole or "0") * 10 ** exponent + int(shifted or "0")


def _from_number(value: Any) -> Optional[str]:
    """Render int/float model output as a magnitude string; reject bools and non-finite floats."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return repr(value) if "e" not in repr(value) else f"{value:f}"
    return None


def parse_tokens(value: Any) -> int:
    """
    Parse a token count into an exact, non-negative integer.

    Args:
        value: Raw value from the vision model, usually a string like "6.60B".

    Returns:
        int: The floored count, or 0 when the value is missing or unreadable.
    """
    if isinstance(value, str):
        text = value
    else:
        text = _from_number(value)
        if text is None:
            if value is not None:
                logger.debug(f"Unreadable token value of type {type(value).__name__}; using 0")
            return 0

    parsed = _bounded(_magnitude(_clean(text)), MAX_TOKENS)
    if parsed is None:
        logger.debug(f"Could not parse token count {text!r}; using 0")
        return 0
    return parsed


def parse_number(value: Any) -> Optional[int]:
    """
    Parse an optional count such as agents, tabs or streak.

    Accepts the same magnitudes as ``parse_tokens`` plus a trailing day unit
    ("56d", "30 days").

    Returns:
        Optional[int]: The floored value, or None when it is missing or unreadable.
    """
    if isinstance(value, str):
        text = value
    else:
        text = _from_number(value)
        if text is None:
            return None

    cleaned = _DAY_UNIT_RE.sub("", _clean(text))
    return _bounded(_magnitude(cleaned), MAX_COUNT)


def parse_days_ago(value: Any) -> Optional[int]:
    """Read "joined N days ago" either as a bare integer or as a phrase containing "<n> day(s)"."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return _bounded(value, MAX_COUNT) if value >= 0 else None
    if isinstance(value, float):
        text = _from_number(value)
        return _bounded(_magnitude(_clean(text)), MAX_COUNT) if text is not None else None
    if not isinstance(value, str):
        return None

    stripped = value.strip()
    if stripped.isdecimal():
        return _bounded(_magnitude(stripped), MAX_COUNT)
    match = _DAYS_PHRASE_RE.search(stripped)
    return int(match.group(1)) if match else None
