"""
Closing summary prompt.
"""
from typing import Sequence

from state import CandidateProfile, QuestionRecord

RECOMMENDATIONS = ["Strongly Recommend", "Recommend", "Consider", "Do Not Recommend"]


def get_summary_system_prompt(job_role: str) -> str:
    return f"""You write professional interview summaries for {job_role} candidates.

Provide a concise 3-4 sentence summary covering:
1. Overall performance and technical strengths
2. Areas that need improvement
3. Hiring recommendation ({" / ".join(RECOMMENDATIONS)})

Keep it professional and constructive. Plain text, no markdown."""


def format_transcript(records: Sequence[QuestionRecord]) -> str:
    return "\n\n".join(
        f"Q{idx} ({r.difficulty.value}): {r.question}\nA: {r.answer}\nScore: {r.score}/10"
        for idx, r in enumerate(records, 1)
    )


def build_summary_request(
    profile: CandidateProfile,
    records: Sequence[QuestionRecord],
    final_percent: int,
) -> str:
    return f"""**Candidate:** {profile.name}
**Email:** {profile.email}
**Final Score:** {final_percent}%

## Interview Questions & Answers

{format_transcript(records)}

Summary:"""
