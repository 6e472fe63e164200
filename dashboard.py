"""
Archive queries for the interviewer view: search, sort and headline stats.
"""
from typing import Dict, List, Sequence

from scoring import is_passing_score
from state import CandidateResult

SORT_OPTIONS = ["score-desc", "score-asc", "name-asc", "name-desc", "date-desc", "date-asc"]
DEFAULT_SORT = "score-desc"


def filter_candidates(results: Sequence[CandidateResult], query: str) -> List[CandidateResult]:
    """Case-insensitive substring match on name, email or phone."""
    if not query or not query.strip():
        return list(results)

    needle = query.strip().lower()
    return [
        r for r in results
        if needle in r.candidate_profile.name.lower()
        or needle in r.candidate_profile.email.lower()
        or needle in r.candidate_profile.phone.lower()
    ]


def sort_candidates(results: Sequence[CandidateResult], sort_by: str = DEFAULT_SORT) -> List[CandidateResult]:
    if sort_by not in SORT_OPTIONS:
        sort_by = DEFAULT_SORT

    field, direction = sort_by.split("-")
    reverse = direction == "desc"

    if field == "score":
        key = lambda r: r.score_percent
    elif field == "name":
        key = lambda r: r.candidate_profile.name.lower()
    else:
        # ISO timestamps sort chronologically as strings
        key = lambda r: r.completed_at

    return sorted(results, key=key, reverse=reverse)


def process_candidates(
    results: Sequence[CandidateResult],
    query: str = "",
    sort_by: str = DEFAULT_SORT,
) -> List[CandidateResult]:
    return sort_candidates(filter_candidates(results, query), sort_by)


def dashboard_stats(results: Sequence[CandidateResult]) -> Dict[str, float]:
    if not results:
        return {"total": 0, "average_score": 0, "passed": 0}

    scores = [r.score_percent for r in results]
    return {
        "total": len(results),
        "average_score": round(sum(scores) / len(scores), 1),
        "passed": sum(1 for s in scores if is_passing_score(s)),
    }
