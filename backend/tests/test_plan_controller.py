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
Tests for the planner controller.

This module tests:
- The create/enhance flow end to end against a scripted provider
- Upload handling
- Refinement guards and failures
- Discarding sessions on reset, including in-flight requests
"""

import asyncio
import threading
from unittest.mock import Mock

import pytest

from metaplanner.core.document_processor import DocumentProcessor, UploadedDocument
from metaplanner.core.errors import (
    EMPTY_INPUT_MESSAGE,
    EXTRACTION_FAILED_MESSAGE,
    SESSION_START_FAILED_MESSAGE,
)
from metaplanner.core.knowledge_base import LOADING_MESSAGES
from metaplanner.core.plan_controller import DOWNLOAD_FILENAME, PlanController
from metaplanner.core.plan_state import REFINE_FAILED_MESSAGE, Step
from metaplanner.core.planning_session import (
    PlanningSession,
    PlanningSessionClient,
    SessionStart,
)
from metaplanner.core.prompts import PlanMode


@pytest.fixture
def controller(fake_provider):
    return PlanController(
        session_client=PlanningSessionClient(llm_provider=fake_provider),
        document_processor=DocumentProcessor(),
    )


def submitted(controller, text="Prepare for the statistics exam"):
    controller.select_mode(PlanMode.CREATE)
    controller.set_input(text)
    return asyncio.run(controller.submit())


class TestSubmit:
    """Test cases for the initial planning exchange."""

    def test_successful_submit_shows_plan(self, controller, fake_provider):
        fake_provider.reply_with("Which time span do you want?")

        state = submitted(controller)

        assert state.step is Step.RESULT
        assert state.plan_result == "Which time span do you want?"
        assert state.has_session
        assert "Prepare for the statistics exam" in fake_provider.sent[0]

    def test_empty_input_never_reaches_provider(self, controller, fake_provider):
        state = submitted(controller, "   ")

        assert state.step is Step.INPUT
        assert state.error == EMPTY_INPUT_MESSAGE
        assert fake_provider.sent == []

    def test_failed_submit_returns_to_input(self, controller, fake_provider):
        fake_provider.reply_with(error=RuntimeError("503 from provider"))

        state = submitted(controller)

        assert state.step is Step.INPUT
        assert state.error == SESSION_START_FAILED_MESSAGE
        assert not state.has_session
        assert state.user_input == "Prepare for the statistics exam"

    def test_unexpected_client_error_is_reported(self, fake_provider):
        session_client = Mock()
        session_client.start_session.side_effect = KeyError("boom")
        controller = PlanController(session_client=session_client)

        state = submitted(controller)

        assert state.step is Step.INPUT
        assert state.error is not None
        assert not state.has_session

    def test_submit_outside_input_step_is_ignored(self, controller, fake_provider):
        state = asyncio.run(controller.submit())

        assert state.step is Step.WELCOME
        assert fake_provider.sent == []


class TestRefine:
    """Test cases for the refinement loop."""

    def test_refinement_replaces_plan(self, controller, fake_provider):
        fake_provider.reply_with("Which time span?")
        fake_provider.reply_with("Weekly plan")
        submitted(controller)

        accepted = asyncio.run(controller.refine("Weekly"))

        assert accepted is True
        assert controller.state.plan_result == "Weekly plan"
        assert not controller.state.is_refining
        assert fake_provider.sent[-1] == "Weekly"

    def test_blank_message_not_sent(self, controller, fake_provider):
        submitted(controller)

        assert asyncio.run(controller.refine("  ")) is False
        assert len(fake_provider.sent) == 1

    def test_refine_without_session(self, controller, fake_provider):
        controller.select_mode(PlanMode.ENHANCE)

        assert asyncio.run(controller.refine("Weekly")) is False
        assert fake_provider.sent == []

    def test_failed_refinement_keeps_plan(self, controller, fake_provider):
        fake_provider.reply_with("First plan")
        fake_provider.reply_with(error=TimeoutError("slow"))
        submitted(controller)
        session = controller.state.session

        accepted = asyncio.run(controller.refine("Make it monthly"))

        assert accepted is True
        assert controller.state.plan_result == "First plan"
        assert controller.state.error == REFINE_FAILED_MESSAGE
        assert controller.state.session is session
        assert not controller.state.is_refining

    def test_second_refinement_rejected_while_first_in_flight(self, controller):
        submitted(controller)
        release = threading.Event()

        def slow_continue(session, message):
            release.wait(timeout=5)
            return f"answer to {message}"

        controller.session_client.continue_session = Mock(side_effect=slow_continue)

        async def scenario():
            first = asyncio.create_task(controller.refine("first"))
            while not controller.state.is_refining:
                await asyncio.sleep(0.01)
            second = await controller.refine("second")
            release.set()
            return await first, second

        first_accepted, second_accepted = asyncio.run(scenario())

        assert first_accepted is True
        assert second_accepted is False
        assert controller.session_client.continue_session.call_count == 1
        assert controller.state.plan_result == "answer to first"


class TestResetAndModes:
    """Sessions are discarded on reset and on a new mode."""

    def test_reset_closes_session(self, controller):
        submitted(controller)
        session = controller.state.session

        state = controller.reset()

        assert state.step is Step.WELCOME
        assert session.closed
        assert not state.has_session

    def test_new_mode_closes_session(self, controller):
        submitted(controller)
        session = controller.state.session

        controller.select_mode(PlanMode.ENHANCE)

        assert session.closed
        assert controller.state.step is Step.INPUT

    def test_next_submit_opens_new_session(self, controller, fake_provider):
        submitted(controller)
        first = controller.state.session
        controller.reset()

        submitted(controller)

        assert controller.state.session is not first
        assert fake_provider.chats_opened == 2

    def test_reset_during_submit_discards_late_session(self, fake_provider):
        release = threading.Event()
        late_session = PlanningSession(chat=Mock(), provider=fake_provider)

        def slow_start(context):
            release.wait(timeout=5)
            return SessionStart(session=late_session, text="late plan")

        session_client = Mock()
        session_client.start_session.side_effect = slow_start
        controller = PlanController(session_client=session_client)
        controller.select_mode(PlanMode.CREATE)
        controller.set_input("Organic chemistry")

        async def scenario():
            task = asyncio.create_task(controller.submit())
            while controller.state.step is not Step.PROCESSING:
                await asyncio.sleep(0.01)
            assert controller.current_loading_message() == LOADING_MESSAGES[0]
            controller.reset()
            release.set()
            return await task

        state = asyncio.run(scenario())

        assert state.step is Step.WELCOME
        assert state.plan_result == ""
        assert not state.has_session
        assert late_session.closed


class TestDocuments:
    """Upload extraction through the controller."""

    def test_upload_replaces_input(self, controller):
        controller.select_mode(PlanMode.ENHANCE)
        controller.set_input("old text")

        applied = asyncio.run(
            controller.load_document(
                UploadedDocument("plan.md", b"# Week 1\n- Recall drills", "text/markdown")
            )
        )

        assert applied is True
        assert controller.state.user_input == "# Week 1\n- Recall drills"
        assert controller.state.error is None
        assert not controller.state.is_parsing_file

    def test_unreadable_upload_keeps_input(self, controller):
        controller.select_mode(PlanMode.ENHANCE)
        controller.set_input("old text")

        applied = asyncio.run(
            controller.load_document(UploadedDocument("scan.png", b"\x89PNG", "image/png"))
        )

        assert applied is True
        assert controller.state.user_input == "old text"
        assert controller.state.error == EXTRACTION_FAILED_MESSAGE

    def test_oversized_upload_rejected(self, controller):
        controller.settings.max_upload_size_mb = 1
        controller.select_mode(PlanMode.ENHANCE)

        asyncio.run(
            controller.load_document(
                UploadedDocument("big.txt", b"a" * (2 * 1024 * 1024), "text/plain")
            )
        )

        assert controller.state.user_input == ""
        assert controller.state.error == EXTRACTION_FAILED_MESSAGE

    def test_unsafe_filename_rejected(self, controller):
        controller.select_mode(PlanMode.ENHANCE)

        asyncio.run(
            controller.load_document(UploadedDocument("../plan.txt", b"text", "text/plain"))
        )

        assert controller.state.error == EXTRACTION_FAILED_MESSAGE

    def test_upload_ignored_outside_input_step(self, controller):
        applied = asyncio.run(
            controller.load_document(UploadedDocument("plan.txt", b"text", "text/plain"))
        )

        assert applied is False
        assert controller.state.step is Step.WELCOME
        assert controller.state.user_input == ""

    def test_reset_while_parsing_discards_upload(self, controller):
        controller.select_mode(PlanMode.ENHANCE)

        def extract_then_reset(document):
            controller.reset()
            return DocumentProcessor().extract(document)

        controller.document_processor = Mock()
        controller.document_processor.extract.side_effect = extract_then_reset

        applied = asyncio.run(
            controller.load_document(UploadedDocument("plan.txt", b"late text", "text/plain"))
        )

        assert applied is False
        assert controller.state.step is Step.WELCOME
        assert controller.state.user_input == ""
        assert not controller.state.is_parsing_file

    def test_new_mode_while_parsing_discards_upload(self, controller):
        controller.select_mode(PlanMode.ENHANCE)

        def extract_then_switch(document):
            controller.select_mode(PlanMode.CREATE)
            return DocumentProcessor().extract(document)

        controller.document_processor = Mock()
        controller.document_processor.extract.side_effect = extract_then_switch

        applied = asyncio.run(
            controller.load_document(UploadedDocument("plan.txt", b"late text", "text/plain"))
        )

        assert applied is False
        assert controller.state.mode is PlanMode.CREATE
        assert controller.state.user_input == ""


class TestExport:
    """Markdown export of the current plan."""

    def test_export_current_plan(self, controller, fake_provider):
        fake_provider.reply_with("# My Plan")
        submitted(controller)

        assert controller.export_plan() == (DOWNLOAD_FILENAME, "# My Plan")

    def test_nothing_to_export_before_result(self, controller):
        controller.select_mode(PlanMode.CREATE)

        assert controller.export_plan() is None

    def test_snapshot(self, controller):
        submitted(controller)

        snapshot = controller.snapshot()

        assert snapshot["step"] == "result"
        assert snapshot["mode"] == "create"
        assert snapshot["has_session"] is True
        assert snapshot["loading_message"] is None
