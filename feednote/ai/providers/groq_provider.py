"""
Groq summarizer implementation for FeedNote.
"""

import groq
from groq import AsyncGroq

from .base import Summarizer, SummarizerType, DEFAULT_TEMPERATURE
from ...utils.exceptions import SummarizationError, ErrorCode
from ...utils.logging import get_logger_for_component


class GroqSummarizer(Summarizer):
    """Summarizer backed by Groq's chat completions API."""

    provider_type = SummarizerType.GROQ
    DEFAULT_MODEL = "llama-3.1-8b-instant"

    def __init__(self, api_key: str, model_name: str = "", **kwargs):
        if not api_key:
            raise SummarizationError(
                "Groq API key is required",
                provider="groq",
                error_code=ErrorCode.AI_INVALID_CREDENTIALS,
                recoverable=False,
            )

        super().__init__(model_name=model_name or self.DEFAULT_MODEL, **kwargs)
        self.async_client = AsyncGroq(api_key=api_key)

        self.logger = get_logger_for_component("groq_provider")
        self.logger.info(f"Groq summarizer initialized with model: {self.model_name}")

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
        except groq.AuthenticationError as e:
            raise SummarizationError(
                "Invalid Groq API key",
                provider="groq",
                error_code=ErrorCode.AI_INVALID_CREDENTIALS,
            ) from e
        except groq.APIError as e:
            raise SummarizationError(f"Groq API error: {e}", provider="groq") from e

        if not response.choices or not response.choices[0].message.content:
            raise SummarizationError(
                "No summary returned from Groq API",
                provider="groq",
                error_code=ErrorCode.AI_INVALID_RESPONSE,
            )

        summary = response.choices[0].message.content.strip()
        self.logger.debug(f"Summary generated: {len(summary)} chars")
        return summary
