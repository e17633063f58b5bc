"""
Extraction result validator.

The vision model is asked for a single JSON object, but its answer is free
text: it may be wrapped in a Markdown code fence, fields may be missing, and
values are human-formatted strings. This module turns that text into an
``ExtractedStats`` record. Only two shapes fail the whole extraction: no
content at all, and content that is not one JSON object. Every field is
otherwise normalized on its own and falls back independently.
"""

import json
import logging
import re
from typing import Any, List, Optional

from wrapped_leaderboard.core.errors import ExtractionUnavailable, ExtractionUnparseable
from wrapped_leaderboard.core.normalizer import parse_days_ago, parse_number, parse_tokens
from wrapped_leaderboard.models.dtos import ExtractedStats

logger = logging.getLogger(__name__)

EXTRACTION_PROMPT = """Extract the following statistics from this Cursor 2025 Wrapped screenshot. Return ONLY a JSON object with these exact keys:
{
  "tokens": "the token count (e.g., '6.60B', '1.2M', '500K')",
  "agents": "the agents count (e.g., '17K', '1.2K')",
  "tabs": "the tabs count (e.g., '4.3K', '500')",
  "streak": "the streak in days (e.g., '56d', '30 days')",
  "usage_percentile": "the usage percentile (e.g., 'Top 5%', 'Top 10%')",
  "top_models": ["model1", "model2", "model3"],
  "joined_days_ago": number
}

If any value is not visible, use null for that field. Be precise with the token count - it's the main metric."""

_FENCED_BLOCK_RE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?(.*?)```", re.DOTALL)
_LEADING_FENCE_RE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\n?```$")


def strip_code_fences(content: str) -> str:
    """
    Remove Markdown code-fence markers around a model answer.

    A complete fenced block anywhere in the text wins; otherwise a dangling
    opening or closing fence is trimmed.
    """
    text = content.strip()
    block = _FENCED_BLOCK_RE.search(text)
    if block:
        return block.group(1).strip()
    text = _LEADING_FENCE_RE.sub("", text)
    text = _TRAILING_FENCE_RE.sub("", text)
    return text.strip()


def _optional_label(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    label = str(value).strip()
    return label or None


def _model_names(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    names = [str(item).strip() for item in value if item is not None and not isinstance(item, (dict, list))]
    names = [name for name in names if name]
    return names or None


def parse_extraction(content: Optional[str]) -> ExtractedStats:
    """
    Validate and normalize the raw answer of the vision model.

    Args:
        content: Text content of the model's completion.

    Returns:
        ExtractedStats: Normalized stats; unreadable fields use the normalizer's fallbacks.

    Raises:
        ExtractionUnavailable: If the model returned no textual content.
        ExtractionUnparseable: If the content is not a single JSON object.
    """
    if content is None or not content.strip():
        raise ExtractionUnavailable()

    unwrapped = strip_code_fences(content)
    try:
        payload = json.loads(unwrapped)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse vision response as JSON: {e}. Content: {content[:200]!r}")
        raise ExtractionUnparseable(details={"reason": str(e)}) from e

    if not isinstance(payload, dict):
        logger.error(f"Vision response is JSON but not an object (got {type(payload).__name__})")
        raise ExtractionUnparseable(details={"reason": f"expected object, got {type(payload).__name__}"})

    stats = ExtractedStats(
        tokens=parse_tokens(payload.get("tokens")),
        agents=parse_number(payload.get("agents")),
        tabs=parse_number(payload.get("tabs")),
        streak=parse_number(payload.get("streak")),
        usage_percentile=_optional_label(payload.get("usage_percentile")),
        top_models=_model_names(payload.get("top_models")),
        joined_days_ago=parse_days_ago(payload.get("joined_days_ago")),
    )
    logger.debug(f"Normalized extraction: {stats.model_dump()}")
    return stats
