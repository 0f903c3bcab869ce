"""
Metacognitive Study Planner - Core Module

This module contains the core functionality of the planner:
- Document text extraction for uploads
- Prompt construction from the learning-science knowledge base
- Planning sessions on top of the LLM providers
- Planner state and its controller
"""

__version__ = "1.0.0"
__author__ = "Metacognitive Study Planner Team"

# Export key classes and functions
from metaplanner.core.document_processor import (
    DocumentContent,
    DocumentKind,
    DocumentProcessor,
    UploadedDocument,
    extract_text_from_upload,
    get_document_processor,
)
from metaplanner.core.errors import (
    EmptyInputError,
    ExtractionError,
    PlannerError,
    SessionContinueError,
    SessionStartError,
)
from metaplanner.core.plan_controller import PlanController, get_plan_controller
from metaplanner.core.plan_state import AppState, Step, reduce
from metaplanner.core.planning_session import (
    PlanningSession,
    PlanningSessionClient,
    get_session_client,
)
from metaplanner.core.prompts import PlanMode, PromptContext, build_prompt
