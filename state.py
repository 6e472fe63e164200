"""
State definitions for the Timed Interview Engine.

Every model is frozen: a transition produces a new snapshot instead of
mutating the old one, which keeps persistence and resume byte-exact.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Phase(str, Enum):
    UPLOAD = "upload"
    COLLECT_INFO = "collect-info"
    INTERVIEWING = "interview"
    COMPLETE = "complete"


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


class CandidateProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    email: str = ""
    phone: str = ""
    resume_text: str = ""


class QuestionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_number: int
    difficulty: Difficulty
    question: str
    answer: str
    score: int = Field(ge=0, le=10)
    feedback: str
    time_used_seconds: int = Field(ge=0)


class InterviewSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    candidate_profile: CandidateProfile = Field(default_factory=CandidateProfile)
    phase: Phase = Phase.UPLOAD
    current_question_index: int = Field(default=0, ge=0)
    current_question: str = ""
    time_remaining: int = Field(default=0, ge=0)
    records: Tuple[QuestionRecord, ...] = ()
    total_score: int = 0
    created_at: str = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_invariants(self) -> "InterviewSession":
        if self.total_score != sum(r.score for r in self.records):
            raise ValueError("total_score must equal the sum of record scores")
        if self.phase in (Phase.INTERVIEWING, Phase.COMPLETE):
            if len(self.records) != self.current_question_index:
                raise ValueError("records must match current_question_index while interviewing")
        return self

    @property
    def questions_asked(self) -> Tuple[str, ...]:
        return tuple(r.question for r in self.records)


class CandidateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    candidate_profile: CandidateProfile
    records: Tuple[QuestionRecord, ...]
    score_percent: int
    total_points: int
    max_points: int
    ai_summary: str
    completed_at: str = Field(default_factory=utc_now)
