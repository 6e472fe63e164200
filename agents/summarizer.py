"""
Summary Agent - writes the closing narrative.
"""
from typing import NamedTuple, Optional, Sequence

from loguru import logger

from errors import ProviderError
from llm_provider import AIProvider
from state import CandidateProfile, QuestionRecord


class Summary(NamedTuple):
    text: str
    warning: Optional[str] = None


def fallback_summary(name: str, final_percent: int, reason: str = "") -> str:
    base = f"Candidate {name} completed the interview with a score of {final_percent}%."
    return f"{base} {reason}" if reason else base


class SummaryGenerator:
    def __init__(self, provider: AIProvider):
        self.provider = provider

    async def summarize(
        self,
        profile: CandidateProfile,
        records: Sequence[QuestionRecord],
        final_percent: int,
    ) -> Summary:
        try:
            text = await self.provider.generate_summary(profile, list(records), final_percent)
        except ProviderError as error:
            logger.warning(f"Summary generation failed ({error.kind.value}), using fallback")
            if error.is_quota_exceeded:
                return Summary(
                    fallback_summary(
                        profile.name, final_percent,
                        "(API limit exceeded - detailed summary unavailable)",
                    ),
                    "API Limit Exceeded! Detailed summary unavailable.",
                )
            return Summary(
                fallback_summary(profile.name, final_percent, "Unable to generate detailed summary."),
                f"Error generating summary: {error.message}",
            )

        return Summary((text or "").strip() or fallback_summary(profile.name, final_percent))
