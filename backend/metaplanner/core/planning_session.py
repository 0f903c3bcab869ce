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
Planning session client.

Opens a conversation with the planning model using the rendered first-turn
prompt, then sends refinement messages on the same conversation. The model
provider keeps the turn history; this module only holds the handle.

Each call is exactly one round trip. Failures are logged in full and
raised as SessionStartError / SessionContinueError with fixed messages.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional
import uuid

from metaplanner.core.errors import SessionContinueError, SessionStartError
from metaplanner.core.llm_providers.base import ChatHandle, Citation, LLMProvider
from metaplanner.core.llm_providers.factory import get_llm_provider
from metaplanner.core.prompts import PromptContext, PromptManager, get_prompt_manager
from metaplanner.utils.logging import get_logger

logger = get_logger(__name__)

START_FALLBACK_TEXT = "I couldn't generate a plan. Please try again with more details."
CONTINUE_FALLBACK_TEXT = "I couldn't generate a response."

SOURCES_HEADING = "### Sources"


@dataclass(eq=False)
class PlanningSession:
    """Handle to one ordered conversation with the planning model."""

    chat: ChatHandle
    provider: LLMProvider
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    turn_count: int = 0
    closed: bool = False

    @property
    def model(self) -> str:
        return self.chat.model

    def close(self) -> None:
        """Discard the session; later turns on it are rejected."""
        if not self.closed:
            self.closed = True
            logger.info(
                f"Planning session {self.session_id} closed after {self.turn_count} turns"
            )


@dataclass
class SessionStart:
    """A freshly opened session and the model's first answer."""

    session: PlanningSession
    text: str


def format_sources(citations: List[Citation]) -> str:
    """Render citations as a markdown list, one ``- [title](uri)`` per line."""
    return "\n".join(f"- [{citation.title}]({citation.uri})" for citation in citations)


def append_grounding_sources(text: str, citations: List[Citation]) -> str:
    """Append a Sources section listing the citations; unchanged if there are none."""
    if not citations:
        return text
    return f"{text}\n\n{SOURCES_HEADING}\n{format_sources(citations)}"


class PlanningSessionClient:
    """Starts and continues planning conversations."""

    def __init__(
        self,
        llm_provider: Optional[LLMProvider] = None,
        prompt_manager: Optional[PromptManager] = None,
    ):
        """
        Args:
            llm_provider: Provider to use for every session. If None, a fresh
                provider is resolved from settings for each new session.
            prompt_manager: Renders the first-turn prompt.
        """
        self.llm_provider = llm_provider
        self.prompt_manager = prompt_manager or get_prompt_manager()

    def start_session(self, context: PromptContext) -> SessionStart:
        """
        Open a new session and send the rendered prompt as its first turn.

        Raises:
            SessionStartError: the prompt could not be built or the model call failed.
                No session is returned in that case.
        """
        try:
            prompt = self.prompt_manager.build_prompt(context)
            provider = self.llm_provider or get_llm_provider()
            chat = provider.start_chat()
        except Exception as e:
            logger.error(f"Could not open planning session: {e}")
            raise SessionStartError() from e

        response = provider.send_message(chat, prompt)
        if not response.success:
            logger.error(f"Planning session start failed: {response.error}")
            raise SessionStartError()

        session = PlanningSession(chat=chat, provider=provider, turn_count=1)
        logger.info(
            f"Planning session {session.session_id} started "
            f"({response.provider_used}/{response.model_used}, "
            f"mode={context.mode.value})"
        )

        text = response.text or START_FALLBACK_TEXT
        return SessionStart(
            session=session, text=append_grounding_sources(text, response.citations)
        )

    def continue_session(self, session: PlanningSession, message: str) -> str:
        """
        Send a follow-up message on an existing session.

        A failed turn leaves the session usable for another attempt.

        Raises:
            SessionContinueError: the session was discarded or the model call failed.
        """
        if session is None or session.closed:
            logger.warning("Refinement attempted on a discarded planning session")
            raise SessionContinueError()

        response = session.provider.send_message(session.chat, message)
        if not response.success:
            logger.error(
                f"Planning session {session.session_id} turn failed: {response.error}"
            )
            raise SessionContinueError()

        session.turn_count += 1
        logger.debug(
            f"Planning session {session.session_id} now at {session.turn_count} turns"
        )

        text = response.text or CONTINUE_FALLBACK_TEXT
        return append_grounding_sources(text, response.citations)


_session_client = None


def get_session_client() -> PlanningSessionClient:
    """Get the global planning session client."""
    global _session_client
    if _session_client is None:
        _session_client = PlanningSessionClient()
    return _session_client
