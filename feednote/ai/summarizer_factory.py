"""
Summarizer Factory
==================

Builds the configured summarizer at startup.
"""

from ..config.settings import LLMSettings, LLMProvider
from ..utils.logging import get_logger_for_component
from ..utils.exceptions import ConfigurationError, ErrorCode
from .providers.base import Summarizer, NoopSummarizer


def create_summarizer(llm_settings: LLMSettings) -> Summarizer:
    """Create a summarizer for the configured provider.

    Args:
        llm_settings: LLM configuration section

    Returns:
        Summarizer instance; ``NoopSummarizer`` when the provider is noop

    Raises:
        ConfigurationError: If the provider is unknown
        SummarizationError: If the provider is missing credentials
    """
    logger = get_logger_for_component("summarizer_factory")

    try:
        provider = LLMProvider(llm_settings.provider)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown LLM provider: {llm_settings.provider}",
            config_key="llm.provider",
            error_code=ErrorCode.CONFIG_INVALID,
        ) from e

    if provider == LLMProvider.NOOP:
        logger.info("Summarization disabled")
        return NoopSummarizer()

    common = dict(
        api_key=llm_settings.api_key or "",
        model_name=llm_settings.model,
        max_tokens=llm_settings.max_tokens,
        system_instruction=llm_settings.system_instruction,
    )

    # Provider SDKs are imported lazily so a noop configuration never loads them
    if provider == LLMProvider.GEMINI:
        from .providers.gemini_provider import GeminiSummarizer
        return GeminiSummarizer(**common)

    if provider == LLMProvider.GROQ:
        from .providers.groq_provider import GroqSummarizer
        return GroqSummarizer(**common)

    from .providers.openai_provider import OpenAISummarizer
    return OpenAISummarizer(**common)
