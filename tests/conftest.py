"""
Shared fixtures: a scripted AI provider and an in-memory store.

Run with: pytest tests/ -v
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio
import io
from typing import List, Optional

import docx
import pytest

from controller import InterviewController
from errors import ProviderError, ProviderErrorKind
from persistence import MemoryStore
from state import CandidateProfile, Difficulty

# Long enough that no countdown ticks during a test unless asked to
FROZEN_TICK = 3600.0

JANE = CandidateProfile(
    name="Jane Doe",
    email="jane@example.com",
    phone="555-123-4567",
    resume_text="Jane Doe\njane@example.com\n555-123-4567\nFive years of React and Node.js.",
)


def docx_bytes(*paragraphs, table_rows=()) -> bytes:
    """Build a DOCX in memory, optionally followed by one table."""
    document = docx.Document()
    for text in paragraphs:
        document.add_paragraph(text)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for row, values in zip(table.rows, table_rows):
            for cell, value in zip(row.cells, values):
                cell.text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def quota_error() -> ProviderError:
    return ProviderError(ProviderErrorKind.QUOTA_EXCEEDED, "429 quota exceeded", status_code=429)


def generic_error(message: str = "connection reset") -> ProviderError:
    return ProviderError(ProviderErrorKind.GENERIC, message)


class FakeProvider:
    """
    AIProvider with scripted replies.

    Queued items are either reply text or an exception to raise. Empty queues
    fall back to the defaults below.
    """

    def __init__(self):
        self.contact_reply = '{"name": "Jane Doe", "email": "jane@example.com", "phone": "555-123-4567"}'
        self.contact_error: Optional[Exception] = None
        self.questions: List[object] = []
        self.evaluations: List[object] = []
        self.summary_reply: object = "Strong fundamentals across the stack."
        self.evaluation_gate: Optional[asyncio.Event] = None
        self.prior_questions_seen: List[List[str]] = []
        self.calls = {"contact": 0, "question": 0, "evaluate": 0, "summary": 0}

    @staticmethod
    def _next(queue: List[object], default: str) -> str:
        item = queue.pop(0) if queue else default
        if isinstance(item, Exception):
            raise item
        return item

    async def extract_contact_info(self, resume_text: str) -> str:
        self.calls["contact"] += 1
        if self.contact_error is not None:
            raise self.contact_error
        return self.contact_reply

    async def generate_question(
        self,
        difficulty: Difficulty,
        question_number: int,
        resume_text: str,
        prior_questions: List[str],
    ) -> str:
        self.calls["question"] += 1
        self.prior_questions_seen.append(list(prior_questions))
        return self._next(self.questions, f"Question {question_number} ({difficulty.value})?")

    async def evaluate_answer(self, question: str, answer: str, difficulty: Difficulty) -> str:
        self.calls["evaluate"] += 1
        if self.evaluation_gate is not None:
            await self.evaluation_gate.wait()
        return self._next(self.evaluations, "Score: 7\nFeedback: Good answer.")

    async def generate_summary(self, profile, records, final_percent) -> str:
        self.calls["summary"] += 1
        if isinstance(self.summary_reply, Exception):
            raise self.summary_reply
        return self.summary_reply


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def controller(provider, store):
    return InterviewController(provider, store, tick_interval=FROZEN_TICK)


@pytest.fixture
def jane():
    return JANE
