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
Logging configuration for the Metacognitive Study Planner.

This module provides centralized logging configuration with:
- JSON structured logging for production
- Readable console logging for development
- Security-aware logging (no API keys)
"""

import logging
from pathlib import Path
import sys
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

from metaplanner.utils.config import Settings


DEVELOPMENT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(name)s %(levelname)s %(funcName)s %(lineno)d %(message)s"

QUIET_LOGGERS = {
    "uvicorn": logging.INFO,
    "httpx": logging.WARNING,
    "google_genai": logging.WARNING,
}


class SecurityFilter(logging.Filter):
    """Mask secrets in log records before any handler formats them."""

    SENSITIVE_KEYS = (
        "gemini_api_key",
        "openai_api_key",
        "api_key",
        "password",
        "secret",
        "token",
    )

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        lowered = message.lower()
        matches = [
            (lowered.find(key), key) for key in self.SENSITIVE_KEYS if key in lowered
        ]
        if matches:
            # Everything from the earliest key onwards is dropped
            position, key = min(matches)
            record.msg = message[:position] + f"{key}=***MASKED***"
            record.args = ()
        return True


def _console_formatter(settings: Settings) -> logging.Formatter:
    if settings.environment == "development":
        return logging.Formatter(DEVELOPMENT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return JsonFormatter(JSON_FORMAT)


def _add_handler(
    root_logger: logging.Logger,
    handler: logging.Handler,
    formatter: logging.Formatter,
) -> None:
    handler.setFormatter(formatter)
    handler.addFilter(SecurityFilter())
    root_logger.addHandler(handler)


def setup_logging(settings: Settings, log_file: Optional[Path] = None) -> None:
    """
    Configure the root logger from settings.

    Development gets a readable console format; every other environment logs
    JSON lines. A log file, when given, always receives JSON at INFO level.
    """
    level = getattr(logging, settings.log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    _add_handler(root_logger, console_handler, _console_formatter(settings))

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        _add_handler(root_logger, file_handler, JsonFormatter(FILE_FORMAT))

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)
