"""
Evaluator Agent - scores each answer.

Parses "Score:" and "Feedback:" out of the provider's reply. Quota exhaustion
gets a fixed default evaluation; any other failure is raised so the question
stays pending.
"""
import re
from typing import NamedTuple

from loguru import logger

from errors import EvaluationFailure, ProviderError
from llm_provider import AIProvider
from state import Difficulty

DEFAULT_SCORE = 5
DEFAULT_FEEDBACK = "Answer received."
QUOTA_FEEDBACK = "API limit reached. Default score assigned."

SCORE_PATTERN = re.compile(r"Score:\s*(\d+)", re.IGNORECASE)
FEEDBACK_PATTERN = re.compile(r"Feedback:\s*(.+)", re.IGNORECASE | re.DOTALL)


class Evaluation(NamedTuple):
    score: int
    feedback: str
    fallback: bool = False


def parse_evaluation_response(response_text: str) -> Evaluation:
    """Parse the evaluator reply, clamping the score into 0-10."""
    text = response_text or ""

    score_match = SCORE_PATTERN.search(text)
    score = min(max(int(score_match.group(1)), 0), 10) if score_match else DEFAULT_SCORE

    feedback_match = FEEDBACK_PATTERN.search(text)
    feedback = feedback_match.group(1).strip() if feedback_match else ""

    return Evaluation(score=score, feedback=feedback or DEFAULT_FEEDBACK)


class AnswerEvaluator:
    def __init__(self, provider: AIProvider):
        self.provider = provider

    async def evaluate(self, question: str, answer: str, difficulty: Difficulty) -> Evaluation:
        try:
            response = await self.provider.evaluate_answer(question, answer, difficulty)
        except ProviderError as error:
            if error.is_quota_exceeded:
                logger.warning("Evaluation quota exceeded, assigning default score")
                return Evaluation(DEFAULT_SCORE, QUOTA_FEEDBACK, fallback=True)
            raise EvaluationFailure(error.kind, error.message, error.status_code) from error

        evaluation = parse_evaluation_response(response)
        logger.debug(f"Evaluated {difficulty.value} answer: {evaluation.score}/10")
        return evaluation
