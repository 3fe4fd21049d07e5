"""
Summarizer Providers Module
===========================

LLM summarizer implementations selected by configuration. Concrete
providers live in their own modules and are imported on demand by
``feednote.ai.summarizer_factory``.
"""

from .base import Summarizer, NoopSummarizer, SummarizerType

__all__ = [
    "Summarizer",
    "NoopSummarizer",
    "SummarizerType",
]
