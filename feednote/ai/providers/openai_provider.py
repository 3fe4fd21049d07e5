"""
OpenAI summarizer implementation for FeedNote.
"""

from typing import Optional

import openai
from openai import AsyncOpenAI

from .base import Summarizer, SummarizerType, DEFAULT_TEMPERATURE
from ...utils.exceptions import SummarizationError, ErrorCode
from ...utils.logging import get_logger_for_component


class OpenAISummarizer(Summarizer):
    """Summarizer backed by the OpenAI chat completions API.

    ``base_url`` allows OpenAI-compatible endpoints.
    """

    provider_type = SummarizerType.OPENAI
    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: str,
        model_name: str = "",
        base_url: Optional[str] = None,
        **kwargs,
    ):
        if not api_key:
            raise SummarizationError(
                "OpenAI API key is required",
                provider="openai",
                error_code=ErrorCode.AI_INVALID_CREDENTIALS,
                recoverable=False,
            )

        super().__init__(model_name=model_name or self.DEFAULT_MODEL, **kwargs)
        self.async_client = AsyncOpenAI(api_key=api_key, base_url=base_url)

        self.logger = get_logger_for_component("openai_provider")
        self.logger.info(f"OpenAI summarizer initialized with model: {self.model_name}")

    async def summarize(self, article_text: str, title: str) -> str:
        try:
            response = await self.async_client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": self.system_instruction},
                    {"role": "user", "content": self.build_user_prompt(article_text, title)},
                ],
                temperature=DEFAULT_TEMPERATURE,
                max_tokens=self.max_tokens,
            )
        except openai.AuthenticationError as e:
            raise SummarizationError(
                "Invalid OpenAI API key",
                provider="openai",
                error_code=ErrorCode.AI_INVALID_CREDENTIALS,
            ) from e
        except openai.APIError as e:
            raise SummarizationError(f"OpenAI API error: {e}", provider="openai") from e

        if not response.choices or not response.choices[0].message.content:
            raise SummarizationError(
                "No summary returned from OpenAI API",
                provider="openai",
                error_code=ErrorCode.AI_INVALID_RESPONSE,
            )

        summary = response.choices[0].message.content.strip()
        self.logger.debug(f"Summary generated: {len(summary)} chars")
        return summary
