"""
AI provider contract and the Anthropic-backed adapter.

The adapter is the only place that looks at raw provider exceptions. Every
failure leaves here as a ProviderError with an explicit kind.
"""
from typing import List, Optional, Protocol, Sequence

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage
from loguru import logger

import config
from errors import ProviderError, ProviderErrorKind
from prompts import (
    build_contact_request,
    build_evaluation_request,
    build_question_request,
    build_summary_request,
    get_contact_system_prompt,
    get_evaluation_system_prompt,
    get_question_system_prompt,
    get_summary_system_prompt,
)
from state import CandidateProfile, Difficulty, QuestionRecord

QUOTA_MARKERS = ("quota", "limit", "429", "resource_exhausted", "api key")


class AIProvider(Protocol):
    async def extract_contact_info(self, resume_text: str) -> str:
        """JSON text with name, email and phone keys."""

    async def generate_question(
        self,
        difficulty: Difficulty,
        question_number: int,
        resume_text: str,
        prior_questions: List[str],
    ) -> str:
        ...

    async def evaluate_answer(self, question: str, answer: str, difficulty: Difficulty) -> str:
        """Structured "Score: ... / Feedback: ..." text."""

    async def generate_summary(
        self,
        profile: CandidateProfile,
        records: Sequence[QuestionRecord],
        final_percent: int,
    ) -> str:
        ...


def classify_provider_error(error: BaseException) -> ProviderError:
    """Map any provider exception to a ProviderError with a kind."""
    if isinstance(error, ProviderError):
        return error

    status_code = getattr(error, "status_code", None)
    message = str(error) or error.__class__.__name__
    lowered = message.lower()

    if status_code == 429 or any(marker in lowered for marker in QUOTA_MARKERS):
        kind = ProviderErrorKind.QUOTA_EXCEEDED
    else:
        kind = ProviderErrorKind.GENERIC

    return ProviderError(kind, message, status_code=status_code)


class AnthropicProvider:
    """AIProvider backed by Claude through langchain-anthropic."""

    def __init__(
        self,
        llm: Optional[ChatAnthropic] = None,
        job_role: str = config.JOB_ROLE,
        total_questions: int = config.TOTAL_QUESTIONS,
    ):
        self.llm = llm or ChatAnthropic(
            model=config.ANTHROPIC_MODEL,
            temperature=config.TEMPERATURE,
            max_tokens=config.MAX_TOKENS,
        )
        self.job_role = job_role
        self.total_questions = total_questions
        self.total_tokens = 0

    async def _complete(self, system_prompt: str, request: str) -> str:
        messages = [
            SystemMessage(content=system_prompt),
            HumanMessage(content=request),
        ]
        try:
            response = await self.llm.ainvoke(messages)
        except Exception as exc:
            error = classify_provider_error(exc)
            logger.warning(f"Provider call failed ({error.kind.value}): {error.message}")
            raise error from exc

        # Track token usage
        usage = response.response_metadata.get("usage", {})
        self.total_tokens += usage.get("input_tokens", 0) + usage.get("output_tokens", 0)

        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )
        return content.strip()

    async def extract_contact_info(self, resume_text: str) -> str:
        return await self._complete(
            get_contact_system_prompt(),
            build_contact_request(resume_text),
        )

    async def generate_question(
        self,
        difficulty: Difficulty,
        question_number: int,
        resume_text: str,
        prior_questions: List[str],
    ) -> str:
        return await self._complete(
            get_question_system_prompt(self.job_role),
            build_question_request(
                difficulty, question_number, self.total_questions, resume_text, prior_questions
            ),
        )

    async def evaluate_answer(self, question: str, answer: str, difficulty: Difficulty) -> str:
        return await self._complete(
            get_evaluation_system_prompt(self.job_role),
            build_evaluation_request(question, answer, difficulty),
        )

    async def generate_summary(
        self,
        profile: CandidateProfile,
        records: Sequence[QuestionRecord],
        final_percent: int,
    ) -> str:
        return await self._complete(
            get_summary_system_prompt(self.job_role),
            build_summary_request(profile, records, final_percent),
        )
