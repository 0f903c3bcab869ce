"""
Metacognitive Study Planner backend.

Turns learner notes, syllabi or existing plans into a metacognitive study
plan through a conversational planning model.
"""

__version__ = "1.0.0"
