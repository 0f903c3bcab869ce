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

"""Static study-technique reference embedded verbatim into every planning prompt."""

KNOWLEDGE_BASE = """
Important Learning Techniques

1. Retrieval Practice (The Testing Effect)
Retrieval practice is the process of recalling facts, concepts, or events from memory.
- Mechanism: Retrieval causes the brain to reconsolidate memory, strengthening connections.
- Optimal Practice: Repeated and spaced out. Effortful retrieval creates stronger learning.
- Metacognitive Benefit: Acts as a "reality check" on mastery (Calibration).

2. Spaced Practice (Distributed Practice)
Distributing study sessions across time.
- Consolidation: Gives the brain time for mental rehearsal and consolidation.
- Retention: Produces stronger, longer-lasting learning compared to massed practice (cramming).

3. Interleaved Practice
Mixing the practice of different but related topics.
- Discrimination Skills: Helps learners discriminate between different types of problems.
- Versatile Application: Boosts long-term retention and application in unfamiliar settings.

4. Varied Practice
Altering conditions or context of practice.
- Transfer of Learning: Improves ability to apply learning in new settings.
- Flexible Mental Models: Encodes learning in a more flexible representation.

5. Elaboration
Giving new material meaning by expressing it in your own words and connecting to prior knowledge.
- Mechanism: Forms more connections between new info and prior knowledge.
- Application: Relating to outside life, teaching someone else, using metaphors.

6. Generation (Generative Learning)
Attempting to answer a question before the solution is shown.
- Benefit of Error: Unsuccessful attempts encourage deep processing when the solution is supplied.

7. Reflection
Reviewing recent experiences and asking targeted questions.
- Application: "What went well?", "What could have gone better?".

8. Calibration (Avoiding Illusions of Knowing)
Aligning subjective judgment of knowledge with objective feedback.
- Illusion of Fluency: Mistaking familiarity for mastery.
- Role of Testing: Frequent low-stakes testing exposes weaknesses.

9. Mnemonic Devices
Mental tools to hold arbitrary material (e.g., Memory Palaces, Acronyms).

Self-Regulation and Planning
- Implementation Intentions (If-Then Planning): "If situation X occurs, then I will do Y." Automates responses.
- Mindfulness Meditation: Strengthens attentional control.
- Specific, Challenging Goal Setting: SMART goals boost performance.
- Growth Mindset: Believing abilities can be developed through effort.

Habit Formation
- Habit Loop: Cue -> Routine -> Reward.
- Kaizen: Small, consistent steps.
- Environment Design: Shape surroundings to reduce friction.

Focus, Deep Work, and Breaks
- Pomodoro Technique: Study 25-50 min, break 5-10 min.
- Monotasking: Focus on one subject at a time to avoid switching costs.

Expertise and Mastery
- Deliberate Practice: Focused, goal-directed practice targeting specific skills.
- Regular Feedback Cycles: Immediate correction of errors.
"""

LOADING_MESSAGES = [
    "Analyzing your learning patterns...",
    "Consulting the Metacognitive Oracle...",
    "Structuring your Pomodoro blocks...",
    "Interleaving your topics for maximum retention...",
    "Calibrating difficulty levels...",
    "Designing your path to mastery...",
    "Optimizing for long-term retention...",
]

LOADING_MESSAGE_INTERVAL_SECONDS = 3.0


def loading_message(elapsed_seconds: float) -> str:
    """Progress message to show after ``elapsed_seconds`` of waiting."""
    index = int(max(elapsed_seconds, 0.0) // LOADING_MESSAGE_INTERVAL_SECONDS)
    return LOADING_MESSAGES[index % len(LOADING_MESSAGES)]
