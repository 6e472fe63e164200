"""
Session transitions.

Each function takes the current InterviewSession plus the event payload and
returns a new session. Nothing here touches the timer, the provider or the
store; the controller sequences those around these transitions.
"""
from typing import Optional

from errors import InvalidTransition
from state import CandidateProfile, InterviewSession, Phase, QuestionRecord


def _require(session: InterviewSession, *phases: Phase) -> None:
    if session.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise InvalidTransition(
            f"Event not allowed in phase '{session.phase.value}' (expected {allowed})"
        )


def new_session(profile: Optional[CandidateProfile] = None) -> InterviewSession:
    """A fresh session in the Upload phase."""
    return InterviewSession(candidate_profile=profile or CandidateProfile())


def collect_info(session: InterviewSession, profile: CandidateProfile) -> InterviewSession:
    """Upload produced an incomplete profile; keep what was found."""
    _require(session, Phase.UPLOAD, Phase.COLLECT_INFO)
    return InterviewSession(candidate_profile=profile, phase=Phase.COLLECT_INFO)


def begin_interview(session: InterviewSession, profile: CandidateProfile) -> InterviewSession:
    _require(session, Phase.UPLOAD, Phase.COLLECT_INFO)
    return InterviewSession(
        candidate_profile=profile,
        phase=Phase.INTERVIEWING,
        current_question_index=0,
    )


def present_question(session: InterviewSession, question: str, time_limit: int) -> InterviewSession:
    _require(session, Phase.INTERVIEWING)
    return session.model_copy(update={
        "current_question": question,
        "time_remaining": time_limit,
    })


def tick(session: InterviewSession, remaining: int) -> InterviewSession:
    _require(session, Phase.INTERVIEWING)
    return session.model_copy(update={"time_remaining": max(0, remaining)})


def record_answer(session: InterviewSession, record: QuestionRecord) -> InterviewSession:
    """Append the record, update the total and move to the next index."""
    _require(session, Phase.INTERVIEWING)
    records = session.records + (record,)
    # model_copy skips validation, so rebuild to re-check the invariants
    return InterviewSession(**{
        **session.model_dump(),
        "records": records,
        "total_score": session.total_score + record.score,
        "current_question_index": session.current_question_index + 1,
        "current_question": "",
        "time_remaining": 0,
    })


def complete(session: InterviewSession) -> InterviewSession:
    _require(session, Phase.INTERVIEWING)
    return session.model_copy(update={
        "phase": Phase.COMPLETE,
        "current_question": "",
        "time_remaining": 0,
    })
