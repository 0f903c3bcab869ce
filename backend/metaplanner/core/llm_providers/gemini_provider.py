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
Gemini LLM Provider Implementation.

Planning sessions run as Gemini chats with Google Search grounding and an
extended thinking budget. The SDK chat object keeps the turn history.
"""

from typing import Any, List, Optional, Tuple

from google import genai
from google.genai import types

from metaplanner.core.llm_providers.base import (
    ChatHandle,
    Citation,
    LLMProvider,
    ProviderType,
)
from metaplanner.utils.config import get_settings, is_usable_api_key


class GeminiProvider(LLMProvider):
    """Google Gemini provider with search grounding."""

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize Gemini provider.

        Args:
            api_key: Gemini API key. If None, uses GEMINI_API_KEY / API_KEY.
        """
        super().__init__(api_key)
        self.settings = get_settings()
        self._client = None

        if not self.api_key:
            self.api_key = self.settings.gemini_api_key

    @property
    def provider_type(self) -> ProviderType:
        """Return the provider type."""
        return ProviderType.GEMINI

    def is_available(self) -> bool:
        """Check if Gemini provider is available."""
        return is_usable_api_key(self.api_key)

    def get_default_model(self) -> str:
        """Get the configured planning model."""
        return self.settings.planner_model

    @property
    def client(self) -> genai.Client:
        """Lazy load Gemini client."""
        if self._client is None:
            if not self.is_available():
                raise ValueError("Gemini API key is required")
            self._client = genai.Client(api_key=self.api_key)
            self.logger.info("Gemini client initialized")
        return self._client

    def _build_config(self) -> types.GenerateContentConfig:
        """Search grounding plus the configured thinking budget."""
        return types.GenerateContentConfig(
            thinking_config=types.ThinkingConfig(
                thinking_budget=self.settings.planner_thinking_budget
            ),
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )

    def start_chat(self, model: Optional[str] = None) -> ChatHandle:
        """Open a Gemini chat; no request is made until the first turn."""
        model = model or self.get_default_model()
        chat = self.client.chats.create(model=model, config=self._build_config())
        self.logger.debug(f"Gemini chat opened with model: {model}")
        return ChatHandle(model=model, conversation=chat)

    def _send(self, chat: ChatHandle, message: str) -> Any:
        return chat.conversation.send_message(message)

    def _parse_response(
        self, response: Any
    ) -> Tuple[str, List[Citation], Optional[str]]:
        """Parse Gemini response into (text, citations, response_id)."""
        text = getattr(response, "text", None) or ""
        citations = self._extract_citations(response)
        request_id = getattr(response, "response_id", None)
        return text, citations, request_id

    def _extract_citations(self, response: Any) -> List[Citation]:
        """Collect web grounding chunks of the first candidate, in order."""
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return []

        metadata = getattr(candidates[0], "grounding_metadata", None)
        chunks = getattr(metadata, "grounding_chunks", None) or []

        citations = []
        for chunk in chunks:
            web = getattr(chunk, "web", None)
            if web is None or not getattr(web, "uri", None):
                continue
            citations.append(Citation(title=web.title or web.uri, uri=web.uri))
        return citations


def get_gemini_provider(api_key: Optional[str] = None) -> GeminiProvider:
    """
    Factory function to create Gemini provider.

    Args:
        api_key: Optional API key override.

    Returns:
        Configured Gemini provider.
    """
    return GeminiProvider(api_key=api_key)
