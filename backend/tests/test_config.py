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
Tests for settings, upload validation and log masking.
"""

import logging

from pydantic import ValidationError
import pytest
from pythonjsonlogger.json import JsonFormatter

from metaplanner.utils.config import Settings, get_settings, is_usable_api_key
from metaplanner.utils.logging import SecurityFilter, setup_logging
from metaplanner.utils.security import InputValidator


class TestSettings:
    """Test cases for environment-driven settings."""

    def test_defaults(self):
        settings = get_settings()

        assert settings.planner_model == "gemini-3-pro-preview"
        assert settings.planner_thinking_budget == 12000
        assert settings.default_llm_provider == "auto"
        assert settings.max_upload_size_mb == 10
        assert settings.gemini_api_key is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
        monkeypatch.setenv("DEFAULT_LLM_PROVIDER", "GEMINI")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.gemini_api_key == "gemini-key"
        assert settings.default_llm_provider == "gemini"
        assert settings.log_level == "DEBUG"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("API_KEY=from-dotenv\nMAX_UPLOAD_SIZE_MB=3\n")

        settings = get_settings()

        assert settings.gemini_api_key == "from-dotenv"
        assert settings.max_upload_size_mb == 3

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "VERBOSE")

        with pytest.raises(ValidationError):
            get_settings()

    def test_invalid_provider(self):
        with pytest.raises(ValidationError):
            Settings(default_llm_provider="mistral")

    @pytest.mark.parametrize(
        "api_key,expected",
        [
            ("real-key", True),
            (None, False),
            ("   ", False),
            ("your_gemini_api_key_here", False),
        ],
    )
    def test_is_usable_api_key(self, api_key, expected):
        assert is_usable_api_key(api_key) is expected


class TestInputValidator:
    """Test cases for upload validation."""

    def test_valid_filename(self):
        assert InputValidator.validate_filename("study plan.docx") == (True, None)

    @pytest.mark.parametrize(
        "filename", ["", "../etc/passwd", "dir\\plan.txt", "run.sh", "a" * 300 + ".txt"]
    )
    def test_invalid_filenames(self, filename):
        is_valid, reason = InputValidator.validate_filename(filename)

        assert not is_valid
        assert reason

    def test_size_limit(self):
        assert InputValidator.validate_size(1024, 1) == (True, None)

        is_valid, reason = InputValidator.validate_size(3 * 1024 * 1024, 2)

        assert not is_valid
        assert "max: 2MB" in reason


class TestSecurityFilter:
    """Secrets in log messages are masked."""

    def test_api_key_masked(self):
        record = logging.LogRecord(
            "metaplanner", logging.INFO, __file__, 1, "Using api_key=sk-secret", None, None
        )

        SecurityFilter().filter(record)

        assert "sk-secret" not in record.getMessage()
        assert "***MASKED***" in record.getMessage()

    def test_plain_message_untouched(self):
        record = logging.LogRecord(
            "metaplanner", logging.INFO, __file__, 1, "Plan exported", None, None
        )

        SecurityFilter().filter(record)

        assert record.getMessage() == "Plan exported"

    def test_message_with_args_is_masked_and_formattable(self):
        record = logging.LogRecord(
            "metaplanner", logging.INFO, __file__, 1, "token budget used: %s", (5,), None
        )

        SecurityFilter().filter(record)

        assert record.getMessage() == "token=***MASKED***"
        assert record.args == ()

    def test_secret_in_args_is_masked(self):
        record = logging.LogRecord(
            "metaplanner", logging.INFO, __file__, 1, "Loaded %s", ("api_key=sk-1",), None
        )

        SecurityFilter().filter(record)

        assert "sk-1" not in record.getMessage()

    def test_masks_from_earliest_key(self):
        record = logging.LogRecord(
            "metaplanner",
            logging.INFO,
            __file__,
            1,
            "password=hunter2 and api_key=sk-secret",
            None,
            None,
        )

        SecurityFilter().filter(record)

        assert record.getMessage() == "password=***MASKED***"


class TestSetupLogging:
    """Console format depends on the environment."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root_logger = logging.getLogger()
        handlers, level = list(root_logger.handlers), root_logger.level
        yield
        root_logger.handlers[:] = handlers
        root_logger.setLevel(level)

    def test_development_uses_readable_format(self):
        setup_logging(Settings(environment="development"))

        handler = logging.getLogger().handlers[0]

        assert type(handler.formatter) is logging.Formatter
        assert any(isinstance(f, SecurityFilter) for f in handler.filters)

    def test_production_uses_json(self):
        setup_logging(Settings(environment="production", log_level="WARNING"))

        root_logger = logging.getLogger()

        assert isinstance(root_logger.handlers[0].formatter, JsonFormatter)
        assert root_logger.level == logging.WARNING

    def test_log_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "planner.log"

        setup_logging(Settings(environment="production"), log_file=log_file)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 2
        assert log_file.parent.is_dir()
        handlers[1].close()
