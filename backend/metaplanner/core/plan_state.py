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
Planner application state and its transition function.

``reduce(state, event)`` is pure: it never performs I/O and never mutates
the state it is given. The step flow is

    welcome -> input -> processing -> result (-> refining -> result)*

and any step returns to welcome on reset.

``generation`` increases whenever the live session is invalidated (mode
selection, reset). Completion events carry the generation that was current
when their request was dispatched; a mismatch means the request belongs to a
superseded session and the event is ignored.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from metaplanner.core.errors import EmptyInputError
from metaplanner.core.planning_session import PlanningSession
from metaplanner.core.prompts import PlanMode

REFINE_FAILED_MESSAGE = "Failed to update plan. Please try again."


class Step(Enum):
    """Screens of the planner flow."""

    WELCOME = "welcome"
    INPUT = "input"
    PROCESSING = "processing"
    RESULT = "result"


@dataclass(frozen=True)
class AppState:
    """Complete planner state; replaced wholesale on every transition."""

    step: Step = Step.WELCOME
    mode: Optional[PlanMode] = None
    user_input: str = ""
    plan_result: str = ""
    error: Optional[str] = None
    session: Optional[PlanningSession] = None
    is_refining: bool = False
    is_parsing_file: bool = False
    generation: int = 0

    @property
    def has_session(self) -> bool:
        return self.session is not None


# Events


@dataclass(frozen=True)
class ModeSelected:
    mode: PlanMode


@dataclass(frozen=True)
class InputChanged:
    text: str


@dataclass(frozen=True)
class FileParsingStarted:
    pass


@dataclass(frozen=True)
class FileParsed:
    text: str
    generation: int


@dataclass(frozen=True)
class FileParsingFailed:
    message: str
    generation: int


@dataclass(frozen=True)
class SubmitRequested:
    pass


@dataclass(frozen=True)
class SessionStarted:
    session: PlanningSession
    text: str
    generation: int


@dataclass(frozen=True)
class SessionStartFailed:
    message: str
    generation: int


@dataclass(frozen=True)
class RefineStarted:
    pass


@dataclass(frozen=True)
class RefineSucceeded:
    text: str
    generation: int


@dataclass(frozen=True)
class RefineFailed:
    message: str
    generation: int


@dataclass(frozen=True)
class ResetRequested:
    pass


def validate_input(text: str) -> None:
    """Reject blank submissions before anything is sent to the model."""
    if not text or not text.strip():
        raise EmptyInputError()


def can_submit(state: AppState) -> bool:
    return (
        state.step is Step.INPUT
        and state.mode is not None
        and not state.is_parsing_file
    )


def can_refine(state: AppState) -> bool:
    return state.step is Step.RESULT and state.has_session and not state.is_refining


def is_stale(state: AppState, event) -> bool:
    """True if a completion event belongs to a superseded session."""
    return getattr(event, "generation", state.generation) != state.generation


def reduce(state: AppState, event) -> AppState:
    """Return the state that follows ``state`` after ``event``."""
    if isinstance(event, ModeSelected):
        return AppState(step=Step.INPUT, mode=event.mode, generation=state.generation + 1)

    if isinstance(event, ResetRequested):
        return AppState(generation=state.generation + 1)

    if is_stale(state, event):
        return state

    if isinstance(event, InputChanged):
        if state.step is not Step.INPUT:
            return state
        return replace(state, user_input=event.text)

    if isinstance(event, FileParsingStarted):
        if state.step is not Step.INPUT or state.is_parsing_file:
            return state
        return replace(state, is_parsing_file=True, error=None)

    if isinstance(event, FileParsed):
        if not state.is_parsing_file:
            return state
        return replace(state, user_input=event.text, is_parsing_file=False)

    if isinstance(event, FileParsingFailed):
        if not state.is_parsing_file:
            return state
        return replace(state, error=event.message, is_parsing_file=False)

    if isinstance(event, SubmitRequested):
        if not can_submit(state):
            return state
        try:
            validate_input(state.user_input)
        except EmptyInputError as e:
            return replace(state, error=e.user_message)
        return replace(state, step=Step.PROCESSING, error=None)

    if isinstance(event, SessionStarted):
        if state.step is not Step.PROCESSING:
            return state
        return replace(
            state, step=Step.RESULT, plan_result=event.text, session=event.session
        )

    if isinstance(event, SessionStartFailed):
        if state.step is not Step.PROCESSING:
            return state
        return replace(state, step=Step.INPUT, error=event.message, session=None)

    if isinstance(event, RefineStarted):
        if not can_refine(state):
            return state
        return replace(state, is_refining=True, error=None)

    if isinstance(event, RefineSucceeded):
        if not state.is_refining:
            return state
        return replace(state, plan_result=event.text, is_refining=False)

    if isinstance(event, RefineFailed):
        if not state.is_refining:
            return state
        return replace(state, error=event.message, is_refining=False)

    raise TypeError(f"Unknown planner event: {event!r}")
