"""
LLM Provider Abstraction for the Metacognitive Study Planner.

This module provides a unified conversational interface over the supported
planning models.
"""

from metaplanner.core.llm_providers.base import (
    ChatHandle,
    Citation,
    GenerationResponse,
    LLMProvider,
    ProviderType,
)
from metaplanner.core.llm_providers.factory import get_available_providers, get_llm_provider
from metaplanner.core.llm_providers.gemini_provider import GeminiProvider
from metaplanner.core.llm_providers.openai_provider import OpenAIProvider

__all__ = [
    "ChatHandle",
    "Citation",
    "GenerationResponse",
    "GeminiProvider",
    "LLMProvider",
    "OpenAIProvider",
    "ProviderType",
    "get_available_providers",
    "get_llm_provider",
]
