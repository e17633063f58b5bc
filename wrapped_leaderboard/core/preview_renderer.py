"""
Share preview image for a single leaderboard entry.

Draws a square PNG with the entry's rank, stats and the ranks around it, used
as the Open Graph image when a leaderboard position is shared.
"""
import io
import logging
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

from wrapped_leaderboard.core.formatting import format_number, format_tokens
from wrapped_leaderboard.core.ranking import Standing

logger = logging.getLogger(__name__)

BACKGROUND = "#111111"
BORDER = "#2b2b2b"
ACCENT = "#3799FF"
CARD_FILL = "#1e3a5f"
ROW_FILL = "#1a1a1a"
CHIP_FILL = "#2b2b2b"
CHIP_BORDER = "#3e3e3e"
TEXT_PRIMARY = "#ffffff"
TEXT_SECONDARY = "#a1a1aa"
TEXT_MUTED = "#71717a"
TEXT_LIGHT = "#d4d4d8"

PADDING = 32


@lru_cache(maxsize=16)
def _font(size: int) -> ImageFont.FreeTypeFont:
    return ImageFont.load_default(size=size)


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def render_preview(standing: Standing, site_label: str, size: int = 1200) -> bytes:
    """
    Render the preview image.

    Args:
        standing: The entry's position and its neighbours.
        site_label: Site name printed in the footer.
        size: Width and height of the square image in pixels.

    Returns:
        bytes: PNG-encoded image.
    """
    submission = standing.submission
    image = Image.new("RGB", (size, size), BACKGROUND)
    draw = ImageDraw.Draw(image)
    right = size - PADDING

    # Header
    draw.text((PADDING, PADDING), "cursor-wrapped / leaderboard", font=_font(16), fill=TEXT_MUTED)
    draw.text((right, PADDING), f"#{standing.rank} of {standing.total}", font=_font(20), fill=ACCENT, anchor="ra")
    y = PADDING + 40
    draw.line([(PADDING, y), (right, y)], fill=BORDER, width=1)

    # Highlight card
    card_top = y + 24
    card_bottom = card_top + 260
    draw.rectangle([(PADDING, card_top), (right, card_bottom)], fill=CARD_FILL, outline=ACCENT, width=2)
    inner = PADDING + 24
    draw.text((inner, card_top + 24), f"#{standing.rank}", font=_font(32), fill=ACCENT)
    draw.text((inner + 110, card_top + 28), _truncate(submission.name, 40), font=_font(28), fill=TEXT_PRIMARY)

    stats = [("Tokens", format_tokens(submission.tokens))]
    if submission.agents is not None:
        stats.append(("Agents", format_number(submission.agents)))
    if submission.streak is not None:
        stats.append(("Streak", f"{submission.streak}d"))
    x = inner
    for label, value in stats:
        draw.text((x, card_top + 90), label, font=_font(14), fill=TEXT_SECONDARY)
        draw.text((x, card_top + 112), value, font=_font(24), fill=TEXT_PRIMARY)
        x += 220

    if submission.top_models:
        x = inner
        chip_top = card_top + 180
        for model in submission.top_models[:3]:
            label = _truncate(model, 28)
            width = int(draw.textlength(label, font=_font(14))) + 20
            draw.rectangle([(x, chip_top), (x + width, chip_top + 30)], fill=CHIP_FILL, outline=CHIP_BORDER)
            draw.text((x + 10, chip_top + 7), label, font=_font(14), fill=TEXT_SECONDARY)
            x += width + 8

    # Nearby ranks
    y = card_bottom + 24
    if standing.neighbours:
        draw.text((PADDING, y), "NEARBY RANKS", font=_font(14), fill=TEXT_MUTED)
        y += 30
        for rank, neighbour in standing.neighbours:
            draw.rectangle([(PADDING, y), (right, y + 48)], fill=ROW_FILL)
            draw.text((PADDING + 12, y + 14), f"#{rank}", font=_font(16), fill=TEXT_MUTED)
            draw.text((PADDING + 80, y + 13), _truncate(neighbour.name, 48), font=_font(18), fill=TEXT_SECONDARY)
            draw.text((right - 12, y + 13), format_tokens(neighbour.tokens), font=_font(18), fill=TEXT_LIGHT, anchor="ra")
            y += 56

    # Footer
    footer_y = size - PADDING - 40
    draw.line([(PADDING, footer_y), (right, footer_y)], fill=BORDER, width=1)
    footer_text = standing.percentile
    if submission.usage_percentile:
        footer_text += f"  ·  {submission.usage_percentile} usage"
    draw.text((PADDING, footer_y + 16), footer_text, font=_font(16), fill=ACCENT)
    draw.text((right, footer_y + 14), f"See where YOU rank → {site_label}", font=_font(18), fill=ACCENT, anchor="ra")

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    logger.debug(f"Rendered preview for submission {submission.id} ({buffer.tell()} bytes)")
    return buffer.getvalue()
