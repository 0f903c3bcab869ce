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
Planner controller.

Owns the single planner state and the live planning session:
- Mode selection, input editing and reset
- File upload extraction into the input text
- The initial planning exchange and the refinement loop
- Export of the current plan as markdown

All transitions go through ``plan_state.reduce``. Blocking work (parsing,
model round trips) runs in a worker thread so the event loop stays free;
every request is tagged with the state generation at dispatch so a reset
while it is in flight discards its result.
"""

import asyncio
import time
from typing import Any, Dict, Optional, Tuple

from metaplanner.core.document_processor import (
    DocumentProcessor,
    UploadedDocument,
    get_document_processor,
)
from metaplanner.core.errors import ExtractionError, PlannerError
from metaplanner.core.knowledge_base import loading_message
from metaplanner.core.plan_state import (
    REFINE_FAILED_MESSAGE,
    AppState,
    FileParsed,
    FileParsingFailed,
    FileParsingStarted,
    InputChanged,
    ModeSelected,
    RefineFailed,
    RefineStarted,
    RefineSucceeded,
    ResetRequested,
    SessionStarted,
    SessionStartFailed,
    Step,
    SubmitRequested,
    reduce,
)
from metaplanner.core.planning_session import PlanningSessionClient, get_session_client
from metaplanner.core.prompts import PlanMode, PromptContext
from metaplanner.utils.config import get_settings
from metaplanner.utils.logging import get_logger
from metaplanner.utils.security import get_input_validator

DOWNLOAD_FILENAME = "metacognitive_study_plan.md"


class PlanController:
    """Coordinates one local planning session."""

    def __init__(
        self,
        session_client: Optional[PlanningSessionClient] = None,
        document_processor: Optional[DocumentProcessor] = None,
    ):
        """
        Initialize the planner controller.

        Args:
            session_client: Talks to the planning model
            document_processor: Extracts text from uploads
        """
        self.settings = get_settings()
        self.logger = get_logger(f"{__name__}.PlanController")

        self.session_client = session_client or get_session_client()
        self.document_processor = document_processor or get_document_processor()
        self.input_validator = get_input_validator()

        self._state = AppState()
        self._waiting_since: Optional[float] = None

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, event) -> AppState:
        """Apply one event; a session dropped by the transition is closed."""
        previous = self._state
        self._state = reduce(previous, event)

        if previous.session is not None and previous.session is not self._state.session:
            previous.session.close()

        if self._state is previous:
            self.logger.debug(f"Ignored {type(event).__name__} in step {previous.step.value}")
        elif self._state.step is not previous.step:
            self.logger.info(
                f"Planner step {previous.step.value} -> {self._state.step.value}"
            )
        return self._state

    # Input collection

    def select_mode(self, mode: PlanMode) -> AppState:
        """Start a new planning attempt in ``mode``, discarding any session."""
        return self.dispatch(ModeSelected(mode))

    def set_input(self, text: str) -> AppState:
        return self.dispatch(InputChanged(text))

    def reset(self) -> AppState:
        """Return to the welcome step with a clean state."""
        return self.dispatch(ResetRequested())

    async def load_document(self, document: UploadedDocument) -> bool:
        """
        Replace the input text with the contents of an uploaded file.

        On failure the input is left untouched and the state carries the
        extraction error message.

        Returns:
            False if the upload had no effect: it arrived outside the input
            step, or a reset or new mode superseded it while it was parsed.
        """
        previous = self._state
        state = self.dispatch(FileParsingStarted())
        if state is previous:
            return False
        generation = state.generation

        try:
            self._validate_upload(document)
            content = await asyncio.to_thread(self.document_processor.extract, document)
        except ExtractionError as e:
            event = FileParsingFailed(e.user_message, generation)
        else:
            event = FileParsed(content.text, generation)

        before = self._state
        applied = self.dispatch(event) is not before
        if not applied:
            self.logger.info(f"Discarded upload {document.filename!r}: planner was reset")
        return applied

    def _validate_upload(self, document: UploadedDocument) -> None:
        """Reject unsafe names and oversized files before parsing."""
        checks = (
            self.input_validator.validate_filename(document.filename),
            self.input_validator.validate_size(
                document.size, self.settings.max_upload_size_mb
            ),
        )
        for is_valid, reason in checks:
            if not is_valid:
                self.logger.warning(f"Rejected upload {document.filename!r}: {reason}")
                raise ExtractionError()

    # Planning exchange

    async def submit(self) -> AppState:
        """
        Send the current input to the planning model.

        Blank input is rejected locally. A failure returns to the input step
        with the error message and no session.
        """
        previous = self._state
        state = self.dispatch(SubmitRequested())
        if previous.step is not Step.INPUT or state.step is not Step.PROCESSING:
            return state

        generation = state.generation
        context = PromptContext(mode=state.mode, input_data=state.user_input)
        self._waiting_since = time.monotonic()

        try:
            started = await asyncio.to_thread(self.session_client.start_session, context)
        except PlannerError as e:
            return self.dispatch(SessionStartFailed(e.user_message, generation))
        except Exception as e:
            self.logger.exception(f"Unexpected error while starting a session: {e}")
            return self.dispatch(
                SessionStartFailed(PlannerError().user_message, generation)
            )

        state = self.dispatch(SessionStarted(started.session, started.text, generation))
        if state.session is not started.session:
            self.logger.info("Discarding planning session that finished after a reset")
            started.session.close()
        return state

    async def refine(self, message: str) -> bool:
        """
        Send one refinement message on the live session.

        Returns:
            False if the message was not sent: it was blank, there is no
            session, or another refinement is still in flight.
        """
        if not message or not message.strip():
            return False

        previous = self._state
        state = self.dispatch(RefineStarted())
        if state is previous:
            self.logger.info("Refinement ignored: no session or one already in flight")
            return False

        generation = state.generation
        self._waiting_since = time.monotonic()

        try:
            text = await asyncio.to_thread(
                self.session_client.continue_session, state.session, message
            )
        except Exception as e:
            if not isinstance(e, PlannerError):
                self.logger.exception(f"Unexpected error while refining: {e}")
            self.dispatch(RefineFailed(REFINE_FAILED_MESSAGE, generation))
            return True

        self.dispatch(RefineSucceeded(text, generation))
        return True

    # Output

    def export_plan(self) -> Optional[Tuple[str, str]]:
        """Return (filename, markdown) for the current plan, if there is one."""
        if self._state.step is not Step.RESULT or not self._state.plan_result:
            return None
        return DOWNLOAD_FILENAME, self._state.plan_result

    def current_loading_message(self) -> Optional[str]:
        """Progress message while a model request is in flight."""
        state = self._state
        if state.step is not Step.PROCESSING and not state.is_refining:
            return None
        elapsed = time.monotonic() - (self._waiting_since or time.monotonic())
        return loading_message(elapsed)

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the state for the API."""
        state = self._state
        return {
            "step": state.step.value,
            "mode": state.mode.value if state.mode else None,
            "user_input": state.user_input,
            "plan_result": state.plan_result,
            "error": state.error,
            "has_session": state.has_session,
            "is_refining": state.is_refining,
            "is_parsing_file": state.is_parsing_file,
            "loading_message": self.current_loading_message(),
        }


_plan_controller = None


def get_plan_controller() -> PlanController:
    """Get the application-wide planner controller."""
    global _plan_controller
    if _plan_controller is None:
        _plan_controller = PlanController()
    return _plan_controller
