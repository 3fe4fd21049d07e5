"""
Summarizer Tests
================

Tests for the summarizer factory, the no-op summarizer and the
provider implementations with their SDK clients patched out.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from feednote.ai.summarizer_factory import create_summarizer
from feednote.ai.providers.base import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_SYSTEM_PROMPT,
    NoopSummarizer,
    SummarizerType,
)
from feednote.config.settings import LLMSettings
from feednote.utils.exceptions import (
    ConfigurationError,
    ErrorCode,
    SummarizationError,
)


def chat_response(content):
    """Minimal chat-completions response object."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)] if content is not None else [])


class TestSummarizerFactory:
    """Test suite for create_summarizer."""

    def test_noop_by_default(self):
        summarizer = create_summarizer(LLMSettings())
        assert isinstance(summarizer, NoopSummarizer)
        assert summarizer.is_enabled() is False

    def test_empty_provider_is_noop(self):
        summarizer = create_summarizer(LLMSettings(provider=""))
        assert isinstance(summarizer, NoopSummarizer)

    def test_unknown_provider_raises(self):
        settings = LLMSettings.model_construct(provider="bogus")
        with pytest.raises(ConfigurationError):
            create_summarizer(settings)

    @pytest.mark.parametrize("provider", ["gemini", "groq", "openai"])
    def test_missing_api_key_raises(self, provider):
        with pytest.raises(SummarizationError) as exc_info:
            create_summarizer(LLMSettings(provider=provider))
        assert exc_info.value.error_code == ErrorCode.AI_INVALID_CREDENTIALS

    def test_groq_settings_are_passed_through(self):
        settings = LLMSettings(
            provider="GROQ",
            api_key="gsk-test",
            model="llama-3.3-70b-versatile",
            max_tokens=200,
            system_instruction="Summarize in one sentence.",
        )
        with patch("feednote.ai.providers.groq_provider.AsyncGroq") as mock_client:
            summarizer = create_summarizer(settings)

        mock_client.assert_called_once_with(api_key="gsk-test")
        assert summarizer.provider_type == SummarizerType.GROQ
        assert summarizer.model_name == "llama-3.3-70b-versatile"
        assert summarizer.max_tokens == 200
        assert summarizer.system_instruction == "Summarize in one sentence."


class TestNoopSummarizer:

    @pytest.mark.asyncio
    async def test_returns_empty(self):
        assert await NoopSummarizer().summarize("text", "title") == ""


class TestPromptBuilding:

    def test_defaults(self):
        summarizer = NoopSummarizer()
        assert summarizer.max_tokens == DEFAULT_MAX_TOKENS
        assert summarizer.system_instruction == DEFAULT_SYSTEM_PROMPT

    def test_long_input_is_truncated(self):
        summarizer = NoopSummarizer(max_input_length=10)
        prompt = summarizer.build_user_prompt("x" * 50, "Title")
        assert prompt == "Title: Title\n\nArticle:\n" + "x" * 10 + "..."

    def test_short_input_is_unchanged(self):
        prompt = NoopSummarizer().build_user_prompt("Body text", "Title")
        assert prompt.endswith("Body text")


class TestGroqSummarizer:

    @pytest.fixture
    def summarizer(self):
        with patch("feednote.ai.providers.groq_provider.AsyncGroq") as mock_client:
            mock_client.return_value.chat.completions.create = AsyncMock()
            from feednote.ai.providers.groq_provider import GroqSummarizer
            yield GroqSummarizer(api_key="gsk-test")

    @pytest.mark.asyncio
    async def test_summarize(self, summarizer):
        create = summarizer.async_client.chat.completions.create
        create.return_value = chat_response("  A concise summary.  ")

        summary = await summarizer.summarize("Long article body", "Headline")

        assert summary == "A concise summary."
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "llama-3.1-8b-instant"
        assert kwargs["messages"][0]["role"] == "system"
        assert "Headline" in kwargs["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_empty_response_raises(self, summarizer):
        summarizer.async_client.chat.completions.create.return_value = chat_response(None)

        with pytest.raises(SummarizationError) as exc_info:
            await summarizer.summarize("body", "title")
        assert exc_info.value.error_code == ErrorCode.AI_INVALID_RESPONSE


class TestOpenAISummarizer:

    @pytest.mark.asyncio
    async def test_summarize_with_custom_base_url(self):
        with patch("feednote.ai.providers.openai_provider.AsyncOpenAI") as mock_client:
            mock_client.return_value.chat.completions.create = AsyncMock(
                return_value=chat_response("Summary.")
            )
            from feednote.ai.providers.openai_provider import OpenAISummarizer
            summarizer = OpenAISummarizer(api_key="sk-test", base_url="http://localhost:8080/v1")

        mock_client.assert_called_once_with(api_key="sk-test", base_url="http://localhost:8080/v1")
        assert await summarizer.summarize("body", "title") == "Summary."
        assert summarizer.async_client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o-mini"


class TestGeminiSummarizer:

    @pytest.fixture
    def mock_genai(self):
        with patch("feednote.ai.providers.gemini_provider.genai") as genai:
            genai.GenerativeModel.return_value.generate_content_async = AsyncMock()
            yield genai

    @pytest.mark.asyncio
    async def test_summarize(self, mock_genai):
        from feednote.ai.providers.gemini_provider import GeminiSummarizer
        model = mock_genai.GenerativeModel.return_value
        model.generate_content_async.return_value = SimpleNamespace(text=" Gemini summary. ")

        summarizer = GeminiSummarizer(api_key="AIza-test")
        summary = await summarizer.summarize("body", "title")

        assert summary == "Gemini summary."
        mock_genai.configure.assert_called_once_with(api_key="AIza-test")
        assert mock_genai.GenerativeModel.call_args.kwargs["model_name"] == "gemini-1.5-flash"

    @pytest.mark.asyncio
    async def test_blocked_response_raises(self, mock_genai):
        from feednote.ai.providers.gemini_provider import GeminiSummarizer

        class BlockedResponse:
            @property
            def text(self):
                raise ValueError("response was blocked")

        model = mock_genai.GenerativeModel.return_value
        model.generate_content_async.return_value = BlockedResponse()

        summarizer = GeminiSummarizer(api_key="AIza-test")
        with pytest.raises(SummarizationError) as exc_info:
            await summarizer.summarize("body", "title")
        assert exc_info.value.error_code == ErrorCode.AI_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_api_key_error_is_mapped(self, mock_genai):
        from feednote.ai.providers.gemini_provider import GeminiSummarizer
        model = mock_genai.GenerativeModel.return_value
        model.generate_content_async.side_effect = RuntimeError("API key not valid")

        summarizer = GeminiSummarizer(api_key="AIza-test")
        with pytest.raises(SummarizationError) as exc_info:
            await summarizer.summarize("body", "title")
        assert exc_info.value.error_code == ErrorCode.AI_INVALID_CREDENTIALS
