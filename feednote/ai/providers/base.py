"""
Base Summarizer Interface
=========================

Abstract base class for LLM summarizers plus the no-op implementation
used when summarization is switched off.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

DEFAULT_SYSTEM_PROMPT = (
    "You are an expert at summarizing articles. "
    "Summarize the following article concisely:\n"
    "- Cover the key points in 3 to 5 sentences\n"
    "- Prioritize the most important information\n"
    "- Answer in the same language as the article"
)

DEFAULT_MAX_INPUT_LENGTH = 4000
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.3


class SummarizerType(str, Enum):
    """Available summarizer providers."""
    NOOP = "noop"
    GEMINI = "gemini"
    GROQ = "groq"
    OPENAI = "openai"


class Summarizer(ABC):
    """Produces a short summary of an article."""

    provider_type: SummarizerType = SummarizerType.NOOP

    def __init__(
        self,
        model_name: str = "",
        max_tokens: int = 0,
        system_instruction: Optional[str] = None,
        max_input_length: int = DEFAULT_MAX_INPUT_LENGTH,
    ):
        self.model_name = model_name
        self.max_tokens = max_tokens or DEFAULT_MAX_TOKENS
        self.system_instruction = system_instruction or DEFAULT_SYSTEM_PROMPT
        self.max_input_length = max_input_length

    @abstractmethod
    async def summarize(self, article_text: str, title: str) -> str:
        """Summarize an article.

        Args:
            article_text: Article body (truncated to ``max_input_length``)
            title: Article title

        Returns:
            Summary text

        Raises:
            SummarizationError: If the provider fails or returns nothing
        """

    def is_enabled(self) -> bool:
        return True

    def build_user_prompt(self, article_text: str, title: str) -> str:
        """Build the user message, truncating long input."""
        if len(article_text) > self.max_input_length:
            article_text = article_text[: self.max_input_length] + "..."
        return f"Title: {title}\n\nArticle:\n{article_text}"

    def __str__(self) -> str:
        return f"{self.provider_type.value}:{self.model_name or 'default'}"


class NoopSummarizer(Summarizer):
    """Disabled summarizer. Never called by the processor."""

    provider_type = SummarizerType.NOOP

    async def summarize(self, article_text: str, title: str) -> str:
        return ""

    def is_enabled(self) -> bool:
        return False
