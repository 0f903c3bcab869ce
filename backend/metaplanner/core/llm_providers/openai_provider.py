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
OpenAI LLM Provider Implementation.

Uses the Responses API with the web search tool and a reasoning effort.
Conversation history is kept server-side: every turn chains onto the
previous response ID stored in the chat handle.
"""

from typing import Any, Dict, List, Optional, Tuple

from openai import OpenAI

from metaplanner.core.llm_providers.base import (
    ChatHandle,
    Citation,
    LLMProvider,
    ProviderType,
)
from metaplanner.utils.config import get_settings, is_usable_api_key


class OpenAIProvider(LLMProvider):
    """OpenAI provider using the Responses API."""

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key. If None, uses OPENAI_API_KEY.
        """
        super().__init__(api_key)
        self.settings = get_settings()
        self._client = None

        if not self.api_key:
            self.api_key = self.settings.openai_api_key

    @property
    def provider_type(self) -> ProviderType:
        """Return the provider type."""
        return ProviderType.OPENAI

    def is_available(self) -> bool:
        """Check if OpenAI provider is available."""
        return is_usable_api_key(self.api_key)

    def get_default_model(self) -> str:
        """Get the configured OpenAI planning model."""
        return self.settings.openai_planner_model

    def _supports_reasoning_effort(self, model: str) -> bool:
        """Check if a model supports the reasoning parameter."""
        return isinstance(model, str) and model.startswith(("gpt-5", "o3", "o4"))

    @property
    def client(self) -> OpenAI:
        """Lazy load OpenAI client."""
        if self._client is None:
            if not self.is_available():
                raise ValueError("OpenAI API key is required")
            self._client = OpenAI(api_key=self.api_key)
            self.logger.info("OpenAI client initialized")
        return self._client

    def start_chat(self, model: Optional[str] = None) -> ChatHandle:
        """Start an empty conversation; the first turn creates it server-side."""
        if not self.is_available():
            raise ValueError("OpenAI API key is required")
        return ChatHandle(model=model or self.get_default_model())

    def _send(self, chat: ChatHandle, message: str) -> Any:
        """Send one turn, chained onto the previous response."""
        api_params: Dict[str, Any] = {
            "model": chat.model,
            "input": message,
            "tools": [{"type": "web_search"}],
        }
        if self._supports_reasoning_effort(chat.model):
            api_params["reasoning"] = {"effort": self.settings.openai_reasoning_effort}
        if chat.last_response_id:
            api_params["previous_response_id"] = chat.last_response_id

        response = self.client.responses.create(**api_params)

        # Only a successful turn moves the conversation forward
        chat.last_response_id = response.id
        return response

    def _parse_response(
        self, response: Any
    ) -> Tuple[str, List[Citation], Optional[str]]:
        """Parse a Responses API result into (text, citations, response_id)."""
        text = getattr(response, "output_text", None) or ""
        return text, self._extract_citations(response), getattr(response, "id", None)

    def _extract_citations(self, response: Any) -> List[Citation]:
        """Collect url_citation annotations from message output, first mention wins."""
        citations: List[Citation] = []
        seen = set()

        for item in getattr(response, "output", None) or []:
            if getattr(item, "type", None) != "message":
                continue
            for part in getattr(item, "content", None) or []:
                for annotation in getattr(part, "annotations", None) or []:
                    if getattr(annotation, "type", None) != "url_citation":
                        continue
                    url = getattr(annotation, "url", None)
                    if not url or url in seen:
                        continue
                    seen.add(url)
                    citations.append(
                        Citation(title=getattr(annotation, "title", None) or url, uri=url)
                    )

        return citations


def get_openai_provider(api_key: Optional[str] = None) -> OpenAIProvider:
    """
    Factory function to create OpenAI provider.

    Args:
        api_key: Optional API key override.

    Returns:
        Configured OpenAI provider.
    """
    return OpenAIProvider(api_key=api_key)
