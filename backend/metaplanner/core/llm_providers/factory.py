"""
Copyright 2024 Metacognitive Study Planner Contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
LLM Provider Factory.

Creates the planning provider from the configured preference. With ``auto``
the first provider that has an API key wins, Gemini first.
"""

from typing import Dict, Optional

from metaplanner.core.llm_providers.base import LLMProvider, ProviderType
from metaplanner.core.llm_providers.gemini_provider import GeminiProvider
from metaplanner.core.llm_providers.openai_provider import OpenAIProvider
from metaplanner.utils.config import get_settings
from metaplanner.utils.logging import get_logger

logger = get_logger(__name__)

PROVIDER_CLASSES = {
    ProviderType.GEMINI: GeminiProvider,
    ProviderType.OPENAI: OpenAIProvider,
}

# Order used for automatic selection
AUTO_PREFERENCE = [ProviderType.GEMINI, ProviderType.OPENAI]


def get_llm_provider(
    provider_type: Optional[ProviderType] = None, api_key: Optional[str] = None
) -> LLMProvider:
    """
    Get an LLM provider instance.

    Args:
        provider_type: Provider to create. Defaults to DEFAULT_LLM_PROVIDER.
        api_key: Optional API key override (ignored for AUTO).

    Returns:
        A provider. With AUTO and no configured keys this is an unavailable
        Gemini provider, so the failure surfaces when a session starts.
    """
    if provider_type is None:
        provider_type = ProviderType(get_settings().default_llm_provider)

    if provider_type == ProviderType.AUTO:
        for candidate in AUTO_PREFERENCE:
            provider = PROVIDER_CLASSES[candidate]()
            if provider.is_available():
                logger.info(f"Auto-selected LLM provider: {candidate.value}")
                return provider
        logger.warning("No LLM provider has an API key configured")
        return PROVIDER_CLASSES[AUTO_PREFERENCE[0]]()

    provider_cls = PROVIDER_CLASSES.get(provider_type)
    if provider_cls is None:
        raise ValueError(f"Unsupported provider type: {provider_type}")
    return provider_cls(api_key=api_key)


def get_available_providers() -> Dict[ProviderType, bool]:
    """Report which providers currently have a usable API key."""
    return {
        provider_type: provider_cls().is_available()
        for provider_type, provider_cls in PROVIDER_CLASSES.items()
    }
