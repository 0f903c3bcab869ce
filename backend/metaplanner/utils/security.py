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
Upload validation helpers.

User text is passed to the planning model as-is; only the uploaded file
itself (name and size) is checked before it reaches a parser.
"""

from pathlib import Path
from typing import Optional

from metaplanner.utils.logging import get_logger

logger = get_logger(__name__)

BYTES_PER_MB = 1024 * 1024
MAX_FILENAME_LENGTH = 255


class InputValidator:
    """Validates uploaded files before extraction."""

    DANGEROUS_EXTENSIONS = {".exe", ".bat", ".cmd", ".sh", ".ps1", ".scr", ".vbs"}

    @staticmethod
    def validate_filename(filename: str) -> tuple[bool, Optional[str]]:
        """
        Validate filename for security.

        Args:
            filename: Filename to validate

        Returns:
            Tuple of (is_safe, error_message)
        """
        if not isinstance(filename, str) or not filename.strip():
            return False, "Filename must be a non-empty string"

        if "/" in filename or "\\" in filename or filename == "..":
            return False, "Filename contains invalid path characters"

        if Path(filename).suffix.lower() in InputValidator.DANGEROUS_EXTENSIONS:
            return False, "Dangerous file extension detected"

        if len(filename) > MAX_FILENAME_LENGTH:
            return False, "Filename too long"

        return True, None

    @staticmethod
    def validate_size(size_bytes: int, max_size_mb: int) -> tuple[bool, Optional[str]]:
        """Check an upload against the configured size limit."""
        size_mb = size_bytes / BYTES_PER_MB
        if size_mb > max_size_mb:
            return False, f"File too large: {size_mb:.1f}MB (max: {max_size_mb}MB)"
        return True, None


_input_validator = None


def get_input_validator() -> InputValidator:
    """Get the global input validator instance."""
    global _input_validator
    if _input_validator is None:
        _input_validator = InputValidator()
    return _input_validator
