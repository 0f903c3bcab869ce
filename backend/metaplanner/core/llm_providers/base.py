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
Base LLM Provider Abstract Class.

Defines the common interface for conversational planning models: open a
stateful chat, send one turn at a time, and report the generated text along
with any web sources the model cited.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
import time
from typing import Any, List, Optional, Tuple

from metaplanner.utils.logging import get_logger


class ProviderType(Enum):
    """Available LLM provider types."""

    GEMINI = "gemini"
    OPENAI = "openai"
    AUTO = "auto"  # Automatically select based on available API keys


@dataclass(frozen=True)
class Citation:
    """A web source the model reports having consulted."""

    title: str
    uri: str


@dataclass
class GenerationResponse:
    """Response from one conversational turn."""

    text: str
    success: bool
    citations: List[Citation] = field(default_factory=list)
    model_used: str = "unknown"
    provider_used: str = "unknown"
    generation_time: float = 0.0
    error: Optional[str] = None
    request_id: Optional[str] = None


@dataclass
class ChatHandle:
    """Provider-side conversation state for one planning session."""

    model: str
    conversation: Any = None
    last_response_id: Optional[str] = None


class LLMProvider(ABC):
    """Abstract base class for conversational LLM providers."""

    def __init__(self, api_key: Optional[str] = None):
        """
        Initialize the LLM provider.

        Args:
            api_key: API key for the provider. If None, uses settings.
        """
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")
        self.api_key = api_key

    @property
    @abstractmethod
    def provider_type(self) -> ProviderType:
        """Return the provider type."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is available (API key set, etc.)."""
        pass

    @abstractmethod
    def get_default_model(self) -> str:
        """Get the default planning model for this provider."""
        pass

    @abstractmethod
    def start_chat(self, model: Optional[str] = None) -> ChatHandle:
        """
        Open a new conversation with web search and extended reasoning enabled.

        The returned handle holds the conversation history; it is passed back
        to ``send_message`` for every turn.
        """
        pass

    @abstractmethod
    def _send(self, chat: ChatHandle, message: str) -> Any:
        """Send one turn on the chat and return the raw provider response."""
        pass

    @abstractmethod
    def _parse_response(
        self, response: Any
    ) -> Tuple[str, List[Citation], Optional[str]]:
        """Parse the provider response into (text, citations, request_id)."""
        pass

    def send_message(self, chat: ChatHandle, message: str) -> GenerationResponse:
        """
        Send one message on an open chat.

        Args:
            chat: Handle returned by ``start_chat``.
            message: The turn's text.

        Returns:
            Generation response; ``success`` is False if the call failed.
        """
        start_time = time.time()
        model = chat.model

        try:
            if not self.is_available():
                raise ValueError(
                    f"{self.provider_type.value} provider is not available"
                )

            self.logger.debug(
                f"Sending {len(message)} character turn to {model}"
            )
            response = self._send(chat, message)
            text, citations, request_id = self._parse_response(response)
            generation_time = time.time() - start_time

            self.logger.info(
                f"Turn completed in {generation_time:.2f}s "
                f"({len(citations)} sources cited)"
            )

            return GenerationResponse(
                text=text,
                success=True,
                citations=citations,
                model_used=model,
                provider_used=self.provider_type.value,
                generation_time=generation_time,
                request_id=request_id,
            )

        except Exception as e:
            generation_time = time.time() - start_time
            error_msg = f"Content generation failed: {str(e)}"
            self.logger.error(error_msg)

            return GenerationResponse(
                text="",
                success=False,
                model_used=model,
                provider_used=self.provider_type.value,
                generation_time=generation_time,
                error=error_msg,
            )
