"""
Google Gemini summarizer implementation for FeedNote.
"""

import google.generativeai as genai
from google.generativeai.types import HarmCategory, HarmBlockThreshold

from .base import Summarizer, SummarizerType, DEFAULT_TEMPERATURE
from ...utils.exceptions import SummarizationError, ErrorCode
from ...utils.logging import get_logger_for_component


class GeminiSummarizer(Summarizer):
    """Summarizer backed by Google's Gemini API."""

    provider_type = SummarizerType.GEMINI
    DEFAULT_MODEL = "gemini-1.5-flash"

    def __init__(self, api_key: str, model_name: str = "", **kwargs):
        """Initialize Gemini summarizer.

        Args:
            api_key: Google Gemini API key
            model_name: Model to use (default: gemini-1.5-flash)

        Raises:
            SummarizationError: If the API key is missing
        """
        if not api_key:
            raise SummarizationError(
                "Gemini API key is required",
                provider="gemini",
                error_code=ErrorCode.AI_INVALID_CREDENTIALS,
                recoverable=False,
            )

        super().__init__(model_name=model_name or self.DEFAULT_MODEL, **kwargs)

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=self.model_name,
            system_instruction=self.system_instruction,
            safety_settings={
                HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
                HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
            },
        )

        self.logger = get_logger_for_component("gemini_provider")
        self.logger.info(f"Gemini summarizer initialized with model: {self.model_name}")

    async def summarize(self, article_text: str, title: str) -> str:
        prompt = self.build_user_prompt(article_text, title)

        try:
            response = await self.model.generate_content_async(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    temperature=DEFAULT_TEMPERATURE,
                    max_output_tokens=self.max_tokens,
                ),
            )
        except Exception as e:
            if "api key" in str(e).lower():
                raise SummarizationError(
                    "Invalid Gemini API key",
                    provider="gemini",
                    error_code=ErrorCode.AI_INVALID_CREDENTIALS,
                ) from e
            raise SummarizationError(f"Gemini API error: {e}", provider="gemini") from e

        # response.text raises ValueError when the candidate was blocked or empty
        try:
            summary = response.text.strip()
        except ValueError as e:
            raise SummarizationError(
                f"Gemini summary blocked or empty: {e}",
                provider="gemini",
                error_code=ErrorCode.AI_INVALID_RESPONSE,
            ) from e

        if not summary:
            raise SummarizationError(
                "No summary returned from Gemini API",
                provider="gemini",
                error_code=ErrorCode.AI_INVALID_RESPONSE,
            )

        self.logger.debug(f"Summary generated: {len(summary)} chars")
        return summary
