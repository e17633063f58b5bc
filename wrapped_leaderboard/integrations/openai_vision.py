"""
OpenAI vision client used to read stats off an uploaded screenshot.

Sends one single-turn chat completion carrying the fixed extraction prompt and
the image inlined as a base64 data URL, and returns the raw text answer. No
retries: a failed call fails the submission.
"""

import base64
import logging
from typing import Optional

import openai

from wrapped_leaderboard.core.errors import ExtractionUnavailable
from wrapped_leaderboard.core.extraction import EXTRACTION_PROMPT

logger = logging.getLogger(__name__)


class VisionExtractor:
    """
    Thin async wrapper around ``openai.AsyncOpenAI`` for screenshot extraction.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o",
        max_tokens: int = 500,
        timeout: float = 60.0,
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        """
        Initialize the extractor.

        Args:
            api_key: OpenAI API key. Ignored when ``client`` is given.
            model: Vision-capable chat model name.
            max_tokens: Upper bound on the completion length.
            timeout: Request timeout in seconds.
            client: Pre-built client, mainly for tests.
        """
        self.model = model
        self.max_tokens = max_tokens
        self._client = client or openai.AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        logger.info(f"Vision extractor initialized with model: {model}")

    @staticmethod
    def build_messages(image_bytes: bytes, mime_type: str) -> list[dict]:
        encoded = base64.b64encode(image_bytes).decode("ascii")
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": EXTRACTION_PROMPT},
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
                    },
                ],
            }
        ]

    async def extract(self, image_bytes: bytes, mime_type: str) -> str:
        """
        Ask the model to read the screenshot.

        Args:
            image_bytes: Raw image content.
            mime_type: Image MIME type, used in the data URL.

        Returns:
            str: Non-empty text content of the completion.

        Raises:
            ExtractionUnavailable: If the API call fails or returns no content.
        """
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=self.build_messages(image_bytes, mime_type),
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            logger.error(f"Vision request failed: {e}")
            raise ExtractionUnavailable(details={"reason": str(e)}) from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            logger.error("Vision response contained no text content")
            raise ExtractionUnavailable()
        return content

    async def close(self) -> None:
        await self._client.close()
