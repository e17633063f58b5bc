import io

from PIL import Image

from wrapped_leaderboard.core.preview_renderer import render_preview
from wrapped_leaderboard.core.ranking import Standing
from wrapped_leaderboard.models import SubmissionORM


def _submission(n: int, tokens: int, **fields) -> SubmissionORM:
    return SubmissionORM(id=f"sub-{n}", user_id=f"user-{n}", name=f"User {n}", tokens=tokens, **fields)


def test_renders_square_png():
    me = _submission(
        2, 6_600_000_000, agents=17_000, streak=56, top_models=["claude-4-sonnet", "gpt-5", "auto", "o3"],
        usage_percentile="Top 5%",
    )
    standing = Standing(
        submission=me,
        rank=2,
        total=3,
        percentile="Top 67%",
        neighbours=[(1, _submission(1, 9_000_000_000)), (3, _submission(3, 12_000))],
    )

    png = render_preview(standing, "example.com", size=600)

    assert png.startswith(b"\x89PNG")
    image = Image.open(io.BytesIO(png))
    assert image.format == "PNG"
    assert image.size == (600, 600)


def test_renders_without_optional_stats():
    standing = Standing(submission=_submission(1, 0), rank=1, total=1, percentile="Top 1%")

    png = render_preview(standing, "example.com")

    assert Image.open(io.BytesIO(png)).size == (1200, 1200)
