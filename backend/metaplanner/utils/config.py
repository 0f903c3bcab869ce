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
Configuration management for the Metacognitive Study Planner.

This module handles all configuration settings including:
- Environment variables
- API keys for the planning model
- Planner model parameters
- Upload and HTTP settings
"""

from typing import List, Optional

from pydantic import AliasChoices, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

PLACEHOLDER_API_KEYS = {
    "your_gemini_api_key_here",
    "your_openai_api_key_here",
}


class Settings(BaseSettings):
    """Application settings with validation."""

    # Environment
    environment: str = Field(default="production")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO")

    # LLM Configuration
    gemini_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY")
    )
    openai_api_key: Optional[str] = Field(default=None)
    default_llm_provider: str = Field(default="auto")

    # Planner model parameters
    planner_model: str = Field(default="gemini-3-pro-preview")
    planner_thinking_budget: int = Field(default=12000)
    openai_planner_model: str = Field(default="gpt-5")
    openai_reasoning_effort: str = Field(default="high")

    # Uploads
    max_upload_size_mb: int = Field(default=10)

    # HTTP
    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://127.0.0.1:5173"]
    )
    enable_api_csp_headers: bool = Field(default=False)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("default_llm_provider")
    @classmethod
    def validate_default_provider(cls, v):
        """Validate the preferred provider name."""
        valid_providers = {"auto", "gemini", "openai"}
        if v.lower() not in valid_providers:
            raise ValueError(f"Default LLM provider must be one of: {valid_providers}")
        return v.lower()

    @field_validator("openai_reasoning_effort")
    @classmethod
    def validate_reasoning_effort(cls, v):
        valid_efforts = {"minimal", "low", "medium", "high"}
        if v.lower() not in valid_efforts:
            raise ValueError(f"Reasoning effort must be one of: {valid_efforts}")
        return v.lower()

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()


def is_usable_api_key(api_key: Optional[str]) -> bool:
    """Check that an API key is present and not a template placeholder."""
    return (
        api_key is not None
        and len(api_key.strip()) > 0
        and api_key.strip() not in PLACEHOLDER_API_KEYS
    )


# Note: Settings are instantiated on-demand via get_settings()
# to avoid import-time configuration errors
