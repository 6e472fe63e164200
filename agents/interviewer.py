"""
Interviewer Agent - asks the questions.

Maps a question index to its difficulty tier and time limit, asks the
provider for question text, and falls back to a fixed question whenever the
provider fails. Generation never blocks the interview.
"""
from typing import Dict, List, NamedTuple, Optional, Sequence

from loguru import logger

import config
from errors import ProviderError
from llm_provider import AIProvider
from state import CandidateProfile, Difficulty

FALLBACK_QUESTION = "What is your experience with Full Stack Development using React and Node.js?"


class GeneratedQuestion(NamedTuple):
    question: str
    difficulty: Difficulty
    time_limit: int
    warning: Optional[str] = None

    @property
    def used_fallback(self) -> bool:
        return self.warning is not None


class QuestionOrchestrator:
    def __init__(
        self,
        provider: AIProvider,
        schedule: Sequence[Difficulty] = tuple(config.QUESTION_CONFIG),
        timers: Optional[Dict[Difficulty, int]] = None,
        job_role: str = config.JOB_ROLE,
    ):
        if not schedule:
            raise ValueError("Question schedule must not be empty")
        self.provider = provider
        self.schedule = tuple(schedule)
        self.timers = dict(timers or config.QUESTION_TIMERS)
        self.job_role = job_role

    @property
    def total_questions(self) -> int:
        return len(self.schedule)

    @property
    def total_time(self) -> int:
        """Total allotted interview time in seconds."""
        return sum(self.time_limit(i) for i in range(self.total_questions))

    def difficulty(self, index: int) -> Difficulty:
        if not 0 <= index < self.total_questions:
            raise IndexError(f"Question index {index} outside schedule of {self.total_questions}")
        return self.schedule[index]

    def time_limit(self, index: int) -> int:
        return self.timers[self.difficulty(index)]

    def default_question(self, difficulty: Difficulty) -> str:
        return f"What is your experience with {difficulty.value.lower()}-level {self.job_role} development?"

    async def generate_next(
        self,
        index: int,
        profile: CandidateProfile,
        prior_questions: List[str],
    ) -> GeneratedQuestion:
        difficulty = self.difficulty(index)
        time_limit = self.timers[difficulty]

        try:
            text = await self.provider.generate_question(
                difficulty, index + 1, profile.resume_text, list(prior_questions)
            )
        except ProviderError as error:
            if error.is_quota_exceeded:
                warning = "API Limit Exceeded! The API quota has been reached. Using fallback question."
            else:
                warning = f"Error generating question: {error.message}"
            logger.warning(f"Question {index + 1}: {warning}")
            return GeneratedQuestion(FALLBACK_QUESTION, difficulty, time_limit, warning)

        question = (text or "").strip() or self.default_question(difficulty)
        logger.info(f"Question {index + 1}/{self.total_questions} ({difficulty.value}, {time_limit}s) ready")
        return GeneratedQuestion(question, difficulty, time_limit)
