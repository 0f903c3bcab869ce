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
Prompt System for the Metacognitive Study Planner.

Two fixed instruction templates, one per planning mode:
- enhance: critique and rewrite an existing study plan
- create: design a new study plan from the user's goals

Both embed the static knowledge base and the user's text verbatim. Rendering
is pure and deterministic.
"""

from dataclasses import dataclass
from enum import Enum
import re
from typing import Optional

from metaplanner.core.knowledge_base import KNOWLEDGE_BASE
from metaplanner.utils.logging import get_logger

logger = get_logger(__name__)

DETECTED_TYPE_PLACEHOLDER = "[Model to Detect]"

_PLACEHOLDER_PATTERN = re.compile(r"\{(knowledge_base|input_data|detected_type)\}")

ENHANCE_TEMPLATE = """
## TARGET PROMPT: PLAN ENHANCER (for PE Model) ##
## SYSTEM INSTRUCTION: METAPLANNER ##
You are the Planning Engine (PE). Your goal is to review and optimize the user's existing plan based on core metacognitive techniques and topic-specific learning requirements.
1. **ROLE:** Act as a critical Metacognitive Planning Analyst.
2. **KNOWLEDGE GROUNDING:** **Strictly prioritize** principles found in the provided KNOWLEDGE BASE (below) for all planning methodology. Use **Google Search** only for external context (e.g., standard planning formats, subject difficulty).
3. **TOPIC SENSITIVITY:** You must analyze the nature of each subject (e.g., Is it factual? Procedural? Conceptual?) and prescribe the specific learning technique best suited for it (e.g., *Retrieval Practice* for facts, *Interleaved Practice* for problem-solving).
4. **INTERACTIVITY:** You must ask *one* clarifying question if the plan lacks a clear subject, duration, or core commitment before providing the final plan.

## KNOWLEDGE BASE (File Search Simulation) ##
{knowledge_base}

## CONTEXT ##
The user's plan is provided below. Analyze it by comparing its structure against the efficient study techniques retrieved from the Knowledge Base.

## TASK ##
1.  **ASSESS:** Identify all study blocks in the plan that are too long (violate Pomodoro) or lack specific retrieval/review time (violate Spaced Repetition).
2.  **ANALYZE SUBJECTS:** For every subject mentioned, determine its cognitive demand. Does it require rote memorization, deep conceptual understanding, or skill acquisition?
3.  **ENHANCE:** Rewrite the schedule. Explicitly integrate and name the *new* metacognitive techniques applied. **Crucially**, customize the technique to the topic (e.g., use "Active Recall via Flashcards" for Vocabulary, "Interleaved Problem Solving" for Math).
4.  **OUTPUT FORMAT:** Output the final revised schedule in a clean, standard **Markdown table** format that matches the user's original plan type (Day, Week, or Month).

## INPUT DATA ##
Plan Content:
{input_data}

Plan Type Detected: {detected_type}

## EXPECTED OUTPUT FORMAT ##
[Model to Determine based on input]
"""

CREATE_TEMPLATE = """
## TARGET PROMPT: NEW LEARNING PLANNER (for PE Model) ##
## SYSTEM INSTRUCTION: METAPLANNER ##
You are the Planning Engine (PE). Your goal is to create a study plan from scratch based on user requirements, expert techniques, and subject-specific nuances.
1. **ROLE:** Act as a creative Metacognitive Planner and Scheduler.
2. **KNOWLEDGE GROUNDING:** **Strictly prioritize** principles found in the provided KNOWLEDGE BASE (below). Use **Google Search** to understand the nature of the subjects and level of expertise required (e.g., "beginner physics curriculum").
3. **TOPIC SENSITIVITY:** You must customize the learning strategy based on the specific type of material (e.g., *Elaboration* for History/Literature, *Generative Learning* for Sciences, *Spaced Practice* for Languages).
4. **INTERACTIVITY:** If the user has NOT provided an explicit **Time Span** (e.g., "weekly," "monthly"), your **first and only** response must be a single, friendly question asking them to specify the Time Span. Do not proceed until answered.

## KNOWLEDGE BASE (File Search Simulation) ##
{knowledge_base}

## CONTEXT ##
The user's goal is provided below. Synthesize a complete plan based on the techniques retrieved from the Knowledge Base.

## TASK ##
1.  **DETERMINE:** Analyze the user's goal. Identify the **Subject Nature** (Procedural vs Declarative) and **Cognitive Load**.
2.  **STRATEGIZE:** Select the specific metacognitive tools from the Knowledge Base that best fit the *nature* of the identified topics.
3.  **CREATE:** Construct a complete schedule by integrating Fixed Scheduling, Pomodoro timing, and dedicated slots for Spaced Repetition/Retrieval Practice/Habit Formation. Ensure the *activity* within the slot matches the topic (e.g., "Write a summary" for Reading vs "Solve mixed problem set" for Algebra).
4.  **OUTPUT FORMAT:** Output the final plan in a clean, standard **Markdown table** format based on the required Time Span (Day, Week, or Month).

## INPUT DATA ##
User Requirements:
{input_data}

## EXPECTED OUTPUT FORMAT ##
[Model to Determine based on user input]
"""


class PlanMode(Enum):
    """What the user wants the planner to do."""

    CREATE = "create"
    ENHANCE = "enhance"


@dataclass(frozen=True)
class PromptContext:
    """Inputs for a single planning attempt."""

    mode: Optional[PlanMode]
    input_data: str
    detected_type: Optional[str] = None


class PromptManager:
    """Renders the initial planning prompt for a session."""

    def build_prompt(self, context: PromptContext) -> str:
        """
        Render the instruction template for the context's mode.

        Args:
            context: Mode, raw user text and optional detected plan type

        Returns:
            The complete first-turn prompt

        Raises:
            ValueError: the context has no mode
        """
        if context.mode is PlanMode.ENHANCE:
            template = ENHANCE_TEMPLATE
        elif context.mode is PlanMode.CREATE:
            template = CREATE_TEMPLATE
        else:
            raise ValueError("A planning mode must be selected before building a prompt")

        values = {
            "knowledge_base": KNOWLEDGE_BASE,
            "input_data": context.input_data,
            "detected_type": context.detected_type or DETECTED_TYPE_PLACEHOLDER,
        }
        # Single pass, so braces inside user text are never re-expanded
        prompt = _PLACEHOLDER_PATTERN.sub(lambda match: values[match.group(1)], template)
        logger.debug(f"Built {context.mode.value} prompt: {len(prompt)} characters")
        return prompt


# Global instance
_prompt_manager = None


def get_prompt_manager() -> PromptManager:
    """Get the global prompt manager instance."""
    global _prompt_manager
    if _prompt_manager is None:
        _prompt_manager = PromptManager()
    return _prompt_manager


def build_prompt(context: PromptContext) -> str:
    """Render the first-turn prompt for ``context``."""
    return get_prompt_manager().build_prompt(context)
