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
Error types surfaced to the planner's users.

Every error carries a fixed, human-readable ``user_message``. Provider and
parser details stay in the logs and on the exception chain.
"""

EXTRACTION_FAILED_MESSAGE = (
    "Failed to read file. Please ensure it is a valid text, PDF, or DOCX file."
)
EMPTY_INPUT_MESSAGE = "Please provide some input details first!"
SESSION_START_FAILED_MESSAGE = "Failed to communicate with the Metacognitive Planner."
SESSION_CONTINUE_FAILED_MESSAGE = "Failed to continue the planning session."


class PlannerError(Exception):
    """Base class for all user-facing planner errors."""

    default_message = "An unexpected error occurred. Please try again."

    def __init__(self, user_message: str = None):
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class ExtractionError(PlannerError):
    """An uploaded file could not be read."""

    default_message = EXTRACTION_FAILED_MESSAGE


class EmptyInputError(PlannerError):
    """A blank submission; handled locally without contacting the model."""

    default_message = EMPTY_INPUT_MESSAGE


class SessionStartError(PlannerError):
    """Opening a planning session failed."""

    default_message = SESSION_START_FAILED_MESSAGE


class SessionContinueError(PlannerError):
    """A follow-up turn on an existing session failed."""

    default_message = SESSION_CONTINUE_FAILED_MESSAGE
