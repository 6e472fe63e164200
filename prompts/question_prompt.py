"""
Question generation prompt.
"""
from typing import List

from state import Difficulty

DIFFICULTY_FOCUS = {
    Difficulty.EASY: "Focus on fundamental concepts and basic implementation",
    Difficulty.MEDIUM: "Test practical application and problem-solving skills",
    Difficulty.HARD: "Challenge advanced understanding, system design, and best practices",
}

ANSWER_WINDOW = {
    Difficulty.EASY: "20 seconds",
    Difficulty.MEDIUM: "60 seconds",
    Difficulty.HARD: "2 minutes",
}


def get_question_system_prompt(job_role: str) -> str:
    return f"""You are conducting a timed technical interview for a {job_role} position.

You write one interview question at a time. Questions are short, specific and
answerable in writing within the time limit. You never repeat a topic that has
already been covered.

Topics to draw from:
- React: Components, Hooks, State Management, Performance Optimization
- Node.js: Express, APIs, Middleware, Database Integration, Authentication

Return ONLY the question. No preamble, numbering or explanation."""


def build_question_request(
    difficulty: Difficulty,
    question_number: int,
    total_questions: int,
    resume_text: str,
    prior_questions: List[str],
) -> str:
    resume_summary = (resume_text or "")[:1000]
    previous = "\n".join(prior_questions) if prior_questions else "None - this is the first question"

    return f"""## Candidate's Resume Summary

{resume_summary or "No resume provided"}

## Previous Questions Asked

{previous}

## Your Task

Generate a {difficulty.value} level question (Question #{question_number} of {total_questions}).

Requirements:
1. Make it specific to Full Stack Development with React and Node.js
2. {DIFFICULTY_FOCUS[difficulty]}
3. The question should be clear and answerable in {ANSWER_WINDOW[difficulty]}
4. Do NOT repeat topics from previous questions

Question:"""
