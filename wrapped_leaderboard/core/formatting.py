"""Display helpers shared by the leaderboard views and the share preview image."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union


def _abbreviate(value: int, divisor: int, places: int, suffix: str) -> str:
    quantum = Decimal(1).scaleb(-places)
    scaled = (Decimal(value) / Decimal(divisor)).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{scaled}{suffix}"


def format_tokens(tokens: Union[int, str]) -> str:
    """
    Abbreviate a token count: 6_600_000_000 -> "6.60B", 2_500_000 -> "2.50M", 17_000 -> "17.0K".
    """
    value = int(tokens)
    if value >= 1_000_000_000:
        return _abbreviate(value, 1_000_000_000, 2, "B")
    if value >= 1_000_000:
        return _abbreviate(value, 1_000_000, 2, "M")
    if value >= 1_000:
        return _abbreviate(value, 1_000, 1, "K")
    return str(value)


def format_number(value: Optional[int]) -> str:
    """Abbreviate an optional count; unknown values render as "-"."""
    if value is None:
        return "-"
    if value >= 1_000_000:
        return _abbreviate(value, 1_000_000, 1, "M")
    if value >= 1_000:
        return _abbreviate(value, 1_000, 1, "K")
    return str(value)


def percentile_label(rank: int, total: int) -> str:
    """
    Bucket a rank into the label shown on the leaderboard and share image.

    Rank 1 is always "Top 1%"; otherwise the position as a share of the field
    snaps to 1/5/10/25/50%, and anything past the median shows its rounded
    percentile.
    """
    if rank == 1 or total <= 0:
        return "Top 1%"
    percentile = Decimal(rank) * 100 / Decimal(total)
    for threshold in (1, 5, 10, 25, 50):
        if percentile <= threshold:
            return f"Top {threshold}%"
    rounded = percentile.quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return f"Top {rounded}%"
