"""
FeedNote Summarization Module
=============================

Optional LLM summaries for delivered entries, using Gemini, Groq or
OpenAI, with a no-op fallback when disabled.
"""

from .providers.base import Summarizer, NoopSummarizer
from .summarizer_factory import create_summarizer

__all__ = ["Summarizer", "NoopSummarizer", "create_summarizer"]
