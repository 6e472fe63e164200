"""
Answer evaluation prompt. The reply format is what AnswerEvaluator parses.
"""
from state import Difficulty

DIFFICULTY_EXPECTATIONS = {
    Difficulty.EASY: "Expect basic understanding and correct fundamentals",
    Difficulty.MEDIUM: "Expect practical knowledge and problem-solving approach",
    Difficulty.HARD: "Expect deep technical knowledge, best practices, and system thinking",
}


def get_evaluation_system_prompt(job_role: str) -> str:
    return f"""You are evaluating written interview answers for a {job_role} position.

Scoring criteria:
- Technical accuracy (50%)
- Completeness (25%)
- Clarity of explanation (25%)

Score from 0 to 10, where 10 is excellent and 0 is completely incorrect.
An answer that says nothing (for example because time expired) scores 0.

Return in this exact format:
Score: [number]
Feedback: [1-2 sentences of feedback]"""


def build_evaluation_request(question: str, answer: str, difficulty: Difficulty) -> str:
    return f"""**Difficulty Level:** {difficulty.value}
**Expectation:** {DIFFICULTY_EXPECTATIONS[difficulty]}

**Question:**
{question}

**Candidate's Answer:**
{answer}"""
