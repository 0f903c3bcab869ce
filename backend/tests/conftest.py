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

"""Shared fixtures: isolated environment and a scripted in-memory provider."""

from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from metaplanner.core.llm_providers.base import (
    ChatHandle,
    Citation,
    LLMProvider,
    ProviderType,
)

PROVIDER_ENV_VARS = [
    "GEMINI_API_KEY",
    "API_KEY",
    "OPENAI_API_KEY",
    "DEFAULT_LLM_PROVIDER",
    "ENVIRONMENT",
    "LOG_LEVEL",
    "MAX_UPLOAD_SIZE_MB",
]


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real API keys and a local .env out of every test."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@dataclass
class FakeReply:
    text: str = ""
    citations: List[Citation] = field(default_factory=list)
    error: Optional[Exception] = None


class FakeProvider(LLMProvider):
    """Provider that answers from a script and records every turn."""

    def __init__(self):
        super().__init__(api_key="test-key")
        self.replies: List[FakeReply] = []
        self.sent: List[str] = []
        self.chats_opened = 0

    @property
    def provider_type(self) -> ProviderType:
        return ProviderType.GEMINI

    def is_available(self) -> bool:
        return True

    def get_default_model(self) -> str:
        return "fake-planner"

    def reply_with(self, text="", citations=None, error=None):
        self.replies.append(FakeReply(text=text, citations=citations or [], error=error))
        return self

    def start_chat(self, model=None) -> ChatHandle:
        self.chats_opened += 1
        return ChatHandle(model=model or self.get_default_model(), conversation=[])

    def _send(self, chat, message):
        self.sent.append(message)
        reply = self.replies.pop(0) if self.replies else FakeReply(text=f"reply {len(self.sent)}")
        if reply.error is not None:
            raise reply.error
        chat.conversation.append(message)
        return reply

    def _parse_response(self, response):
        return response.text, list(response.citations), None


@pytest.fixture
def fake_provider():
    return FakeProvider()
