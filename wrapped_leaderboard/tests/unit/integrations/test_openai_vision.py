import base64
from types import SimpleNamespace

import httpx
import openai
import pytest
from unittest.mock import AsyncMock, MagicMock

from wrapped_leaderboard.core.errors import ExtractionUnavailable
from wrapped_leaderboard.core.extraction import EXTRACTION_PROMPT
from wrapped_leaderboard.integrations.openai_vision import VisionExtractor


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=_completion('{"tokens": "1K"}'))
    client.close = AsyncMock()
    return client


@pytest.fixture
def extractor(openai_client):
    return VisionExtractor(model="gpt-4o", max_tokens=500, client=openai_client)


def test_build_messages_inlines_image():
    messages = VisionExtractor.build_messages(b"abc", "image/jpeg")

    content = messages[0]["content"]
    assert messages[0]["role"] == "user"
    assert content[0] == {"type": "text", "text": EXTRACTION_PROMPT}
    assert content[1]["image_url"]["url"] == "data:image/jpeg;base64," + base64.b64encode(b"abc").decode()


@pytest.mark.asyncio
async def test_extract_returns_text(extractor, openai_client):
    assert await extractor.extract(b"abc", "image/png") == '{"tokens": "1K"}'

    kwargs = openai_client.chat.completions.create.await_args.kwargs
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["max_tokens"] == 500


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "  "])
async def test_empty_content_is_unavailable(extractor, openai_client, content):
    openai_client.chat.completions.create.return_value = _completion(content)
    with pytest.raises(ExtractionUnavailable):
        await extractor.extract(b"abc", "image/png")


@pytest.mark.asyncio
async def test_no_choices_is_unavailable(extractor, openai_client):
    openai_client.chat.completions.create.return_value = SimpleNamespace(choices=[])
    with pytest.raises(ExtractionUnavailable):
        await extractor.extract(b"abc", "image/png")


@pytest.mark.asyncio
async def test_api_error_is_unavailable(extractor, openai_client):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    openai_client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)

    with pytest.raises(ExtractionUnavailable) as exc_info:
        await extractor.extract(b"abc", "image/png")

    assert isinstance(exc_info.value.__cause__, openai.APIConnectionError)


@pytest.mark.asyncio
async def test_close(extractor, openai_client):
    await extractor.close()
    openai_client.close.assert_awaited_once()
