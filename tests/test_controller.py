"""
Interview controller tests.

Drives whole sessions against the scripted provider. Countdown timers are
frozen by default (one tick per hour); tests that need the clock build a
controller with a short tick interval and a small schedule.

Run with: pytest tests/test_controller.py -v
"""
import asyncio
import threading

import pytest

import transitions
from agents import QuestionOrchestrator
from agents.evaluator import QUOTA_FEEDBACK
from agents.interviewer import FALLBACK_QUESTION
from conftest import FROZEN_TICK, FakeProvider, docx_bytes, generic_error, quota_error
from controller import EXPIRED_ANSWER, InterviewController
from errors import (
    ArchiveFailure,
    EvaluationFailure,
    ExtractionFailure,
    InvalidTransition,
    SessionBusy,
    ValidationFailure,
)
from persistence import CANDIDATES_KEY, CURRENT_SESSION_KEY, MemoryStore, SessionPersistence
from state import CandidateProfile, Difficulty, Phase

SHORT_TIMERS = {Difficulty.EASY: 2, Difficulty.MEDIUM: 3, Difficulty.HARD: 4}


def _single_question_controller(provider, store):
    orchestrator = QuestionOrchestrator(provider, schedule=[Difficulty.EASY], timers=SHORT_TIMERS)
    return InterviewController(provider, store, orchestrator=orchestrator, tick_interval=0.001)


async def _answer(controller, count, text="I would use React hooks."):
    for _ in range(count):
        await controller.submit_answer(text)


# =============================================================================
# UPLOAD AND CANDIDATE INFO
# =============================================================================

def test_complete_extraction_skips_collect_info(controller, store):
    data = docx_bytes("Jane Doe", "jane@example.com", "555-123-4567", "React and Node.js")

    async def scenario():
        await controller.upload_document(data, "resume.docx")

    asyncio.run(scenario())

    assert controller.phase == Phase.INTERVIEWING
    assert controller.session.candidate_profile.name == "Jane Doe"
    assert "React and Node.js" in controller.session.candidate_profile.resume_text
    assert controller.session.current_question == "Question 1 (Easy)?"
    assert controller.session.time_remaining == 45
    assert CURRENT_SESSION_KEY in store.data


def test_incomplete_extraction_collects_info(controller, provider):
    provider.contact_reply = '{"name": "Jane Doe", "email": "", "phone": ""}'
    data = docx_bytes("Jane Doe", "Frontend engineer with React experience")

    async def scenario():
        await controller.upload_document(data, "resume.docx")
        assert controller.phase == Phase.COLLECT_INFO
        assert controller.missing_fields == ["Email", "Phone"]

        await controller.submit_manual_info(
            CandidateProfile(name="Jane Doe", email=" jane@example.com ", phone="555-123-4567")
        )

    asyncio.run(scenario())

    profile = controller.session.candidate_profile
    assert controller.phase == Phase.INTERVIEWING
    assert profile.email == "jane@example.com"
    assert "Frontend engineer" in profile.resume_text


def test_contact_quota_routes_to_manual_entry(controller, provider):
    provider.contact_error = quota_error()
    data = docx_bytes("Jane Doe", "jane@example.com", "555-123-4567")

    asyncio.run(controller.upload_document(data, "resume.docx"))

    assert controller.phase == Phase.COLLECT_INFO
    assert controller.missing_fields == ["Name", "Email", "Phone"]
    assert controller.drain_warnings() == ["API Limit Exceeded! Please fill in your information manually."]
    assert controller.drain_warnings() == []


def test_extraction_failure_keeps_phase(controller, provider):
    with pytest.raises(ExtractionFailure):
        asyncio.run(controller.upload_document(b"not a pdf", "resume.pdf"))

    assert controller.phase == Phase.UPLOAD
    assert provider.calls["contact"] == 0


def test_document_parsing_runs_off_the_event_loop(provider, store):
    class RecordingExtractor:
        def __init__(self):
            self.thread_id = None

        def extract(self, data, filename, content_type=None):
            self.thread_id = threading.get_ident()
            return "Jane Doe\njane@example.com\n555-123-4567\nReact and Node.js"

    extractor = RecordingExtractor()
    controller = InterviewController(provider, store, extractor=extractor, tick_interval=FROZEN_TICK)

    async def scenario():
        await controller.upload_document(b"%PDF", "resume.pdf")
        return threading.get_ident()

    loop_thread = asyncio.run(scenario())

    assert extractor.thread_id is not None
    assert extractor.thread_id != loop_thread
    assert controller.phase == Phase.INTERVIEWING


def test_malformed_email_blocks_transition(controller, store):
    profile = CandidateProfile(name="Jane Doe", email="jane.example.com", phone="555-123-4567")

    with pytest.raises(ValidationFailure) as exc_info:
        asyncio.run(controller.submit_manual_info(profile))

    assert "Valid Email" in exc_info.value.missing_fields
    assert controller.phase == Phase.UPLOAD
    assert CURRENT_SESSION_KEY not in store.data


# =============================================================================
# ANSWERING
# =============================================================================

def test_full_interview_completes_and_archives(controller, provider, store, jane):
    async def scenario():
        await controller.submit_manual_info(jane)
        await _answer(controller, 10)

    asyncio.run(scenario())

    session = controller.session
    assert session.phase == Phase.COMPLETE
    assert len(session.records) == 10
    assert [r.question_number for r in session.records] == list(range(1, 11))
    assert [r.difficulty for r in session.records][3] == Difficulty.MEDIUM
    assert session.total_score == 70

    assert controller.result.score_percent == 70
    assert controller.result.max_points == 100
    assert controller.result.ai_summary == "Strong fundamentals across the stack."
    assert CURRENT_SESSION_KEY not in store.data
    assert [r.id for r in SessionPersistence(store).load_results()] == [session.id]

    # Each question request carried every earlier question
    assert provider.prior_questions_seen[0] == []
    assert len(provider.prior_questions_seen[9]) == 9
    assert provider.calls["summary"] == 1


def test_quota_evaluation_assigns_default_score(controller, provider, jane):
    provider.evaluations = [quota_error()]

    async def scenario():
        await controller.submit_manual_info(jane)
        await controller.submit_answer("Virtual DOM diffing.")

    asyncio.run(scenario())

    record = controller.session.records[0]
    assert record.score == 5
    assert record.feedback == QUOTA_FEEDBACK
    assert controller.session.current_question_index == 1
    assert "API Limit Exceeded! Using default score of 5/10 for this answer." in controller.drain_warnings()


def test_blank_answer_is_ignored(controller, provider, jane):
    async def scenario():
        await controller.submit_manual_info(jane)
        await controller.submit_answer("   ")

    asyncio.run(scenario())

    assert provider.calls["evaluate"] == 0
    assert controller.session.current_question_index == 0


def test_time_used_reflects_elapsed_seconds(provider, store, jane):
    controller = InterviewController(provider, store, tick_interval=0.01)

    async def scenario():
        await controller.submit_manual_info(jane)
        await asyncio.sleep(0.1)
        remaining = controller.session.time_remaining
        await controller.submit_answer("useEffect cleanup.")
        return remaining

    remaining = asyncio.run(scenario())

    assert remaining < 45
    assert controller.session.records[0].time_used_seconds == 45 - remaining


def test_time_used_recorded_on_submit(controller, jane):
    async def scenario():
        await controller.submit_manual_info(jane)
        await controller.submit_answer("An answer.")

    asyncio.run(scenario())

    # Frozen clock: nothing elapsed
    assert controller.session.records[0].time_used_seconds == 0


def test_generic_evaluation_failure_keeps_question_pending(controller, provider, jane):
    provider.evaluations = [generic_error("bad gateway")]

    async def scenario():
        await controller.submit_manual_info(jane)
        question = controller.session.current_question

        with pytest.raises(EvaluationFailure):
            await controller.submit_answer("Props drilling.")

        assert controller.session.records == ()
        assert controller.session.current_question == question
        assert controller.session.time_remaining == 45
        assert controller.timer.is_running
        assert not controller.busy

        await controller.submit_answer("Props drilling.")

    asyncio.run(scenario())

    assert controller.session.current_question_index == 1
    assert provider.calls["evaluate"] == 2


def test_question_quota_uses_fallback(controller, provider, jane):
    provider.questions = [quota_error()]

    asyncio.run(controller.submit_manual_info(jane))

    assert controller.session.current_question == FALLBACK_QUESTION
    assert controller.session.time_remaining == 45
    assert controller.drain_warnings() == [
        "API Limit Exceeded! The API quota has been reached. Using fallback question."
    ]


def test_summary_quota_still_archives(controller, provider, store, jane):
    provider.summary_reply = quota_error()

    async def scenario():
        await controller.submit_manual_info(jane)
        await _answer(controller, 10)

    asyncio.run(scenario())

    assert controller.phase == Phase.COMPLETE
    assert "API limit exceeded" in controller.result.ai_summary
    assert "API Limit Exceeded! Detailed summary unavailable." in controller.drain_warnings()
    assert len(SessionPersistence(store).load_results()) == 1


# =============================================================================
# TIMER EXPIRY
# =============================================================================

def test_expiry_with_empty_draft_records_placeholder(provider, store, jane):
    controller = _single_question_controller(provider, store)

    async def scenario():
        await controller.submit_manual_info(jane)
        await controller.timer.wait()

    asyncio.run(scenario())

    record = controller.session.records[0]
    assert record.answer == EXPIRED_ANSWER
    assert record.time_used_seconds == SHORT_TIMERS[Difficulty.EASY]
    assert controller.phase == Phase.COMPLETE


def test_expiry_submits_draft(controller, jane):
    async def scenario():
        await controller.submit_manual_info(jane)
        controller.update_draft("Half an answer about closures")
        await controller.on_timer_expiry()

    asyncio.run(scenario())

    record = controller.session.records[0]
    assert record.answer == "Half an answer about closures"
    assert record.time_used_seconds == 45
    assert controller.draft_answer == ""


def test_expiry_evaluation_failure_warns_and_waits_for_retry(provider, store, jane):
    provider.evaluations = [generic_error("down")]
    controller = _single_question_controller(provider, store)

    async def scenario():
        await controller.submit_manual_info(jane)
        await controller.timer.wait()

        assert controller.session.records == ()
        assert controller.session.time_remaining == 0
        assert controller.drain_warnings() == ["Error evaluating answer: down"]

        await controller.on_timer_expiry()

    asyncio.run(scenario())

    assert controller.phase == Phase.COMPLETE
    assert controller.session.records[0].answer == EXPIRED_ANSWER


# =============================================================================
# CONCURRENCY
# =============================================================================

def test_events_rejected_while_evaluating(controller, provider, jane):
    async def scenario():
        await controller.submit_manual_info(jane)
        provider.evaluation_gate = asyncio.Event()

        pending = asyncio.ensure_future(controller.submit_answer("First answer."))
        await asyncio.sleep(0)
        assert controller.busy

        with pytest.raises(SessionBusy):
            await controller.submit_answer("Second answer.")
        ignored = await controller.on_timer_expiry()
        assert ignored.records == ()

        provider.evaluation_gate.set()
        await pending

    asyncio.run(scenario())

    assert len(controller.session.records) == 1
    assert controller.session.records[0].answer == "First answer."
    assert provider.calls["evaluate"] == 1


def test_reset_discards_late_evaluation(controller, provider, store, jane):
    async def scenario():
        await controller.submit_manual_info(jane)
        provider.evaluation_gate = asyncio.Event()

        pending = asyncio.ensure_future(controller.submit_answer("Late answer."))
        await asyncio.sleep(0)
        fresh = controller.reset()

        provider.evaluation_gate.set()
        await pending
        return fresh

    fresh = asyncio.run(scenario())

    assert controller.session is fresh
    assert controller.phase == Phase.UPLOAD
    assert controller.session.records == ()
    assert not controller.busy
    assert CURRENT_SESSION_KEY not in store.data
    assert CANDIDATES_KEY not in store.data


# =============================================================================
# RESUME / RESET
# =============================================================================

def test_resume_is_byte_identical(provider, store, jane):
    first = InterviewController(provider, store, tick_interval=FROZEN_TICK)

    async def run_first():
        await first.submit_manual_info(jane)
        await _answer(first, 3)

    asyncio.run(run_first())
    saved_text = store.data[CURRENT_SESSION_KEY]

    second = InterviewController(FakeProvider(), store, tick_interval=FROZEN_TICK)

    async def run_second():
        saved = second.load_saved_session()
        await second.resume(saved)
        assert second.timer.is_running
        return second.snapshot()

    assert asyncio.run(run_second()) == saved_text
    assert second.session.current_question_index == 3
    assert second.session.time_remaining == 80


def test_resume_mid_generation_asks_again(controller, provider, jane):
    saved = transitions.begin_interview(transitions.new_session(), jane)

    asyncio.run(controller.resume(saved))

    assert controller.session.id == saved.id
    assert controller.session.current_question == "Question 1 (Easy)?"
    assert provider.calls["question"] == 1


def test_resume_with_no_time_left_expires_immediately(controller, jane):
    saved = transitions.present_question(
        transitions.begin_interview(transitions.new_session(), jane), "Q1?", 45
    )
    saved = transitions.tick(saved, 0)

    async def scenario():
        await controller.resume(saved)
        await controller.timer.wait()

    asyncio.run(scenario())

    record = controller.session.records[0]
    assert record.answer == EXPIRED_ANSWER
    assert record.time_used_seconds == 45


def test_resume_rejects_completed_session(controller, jane):
    saved = transitions.complete(transitions.begin_interview(transitions.new_session(), jane))

    with pytest.raises(InvalidTransition):
        asyncio.run(controller.resume(saved))


def test_reset_from_any_phase(controller, store, jane):
    async def scenario():
        await controller.submit_manual_info(jane)
        old_id = controller.session.id
        controller.update_draft("draft")
        timer = controller.timer
        controller.reset()
        return old_id, timer

    old_id, timer = asyncio.run(scenario())

    assert controller.phase == Phase.UPLOAD
    assert controller.session.id != old_id
    assert controller.draft_answer == ""
    assert timer.cancelled
    assert controller.timer is None
    assert CURRENT_SESSION_KEY not in store.data


def test_wrong_phase_is_rejected(controller):
    with pytest.raises(InvalidTransition):
        asyncio.run(controller.submit_answer("An answer."))
    with pytest.raises(InvalidTransition):
        controller.update_draft("text")
    with pytest.raises(InvalidTransition):
        asyncio.run(controller.on_timer_expiry())


def test_failed_snapshot_marks_session_not_resumable(provider, jane):
    class BrokenStore(MemoryStore):
        def set(self, key, value):
            if key == CURRENT_SESSION_KEY:
                raise OSError("quota exceeded")
            super().set(key, value)

    controller = InterviewController(provider, BrokenStore(), tick_interval=FROZEN_TICK)

    async def scenario():
        await controller.submit_manual_info(jane)
        await controller.submit_answer("An answer.")

    asyncio.run(scenario())

    assert controller.phase == Phase.INTERVIEWING
    assert controller.session.current_question_index == 1
    assert not controller.resumable
    warnings = controller.drain_warnings()
    assert len([w for w in warnings if "cannot be resumed" in w]) == 1


# =============================================================================
# ARCHIVE FAILURES
# =============================================================================

def test_unreadable_archive_keeps_session_resumable(controller, provider, store, jane):
    store.set(CANDIDATES_KEY, "{not json")

    async def scenario():
        await controller.submit_manual_info(jane)
        await _answer(controller, 9)
        with pytest.raises(ArchiveFailure):
            await controller.submit_answer("Last answer.")

    asyncio.run(scenario())

    assert controller.phase == Phase.INTERVIEWING
    assert controller.result is None
    assert not controller.busy
    saved = SessionPersistence(store).load_session()
    assert saved.id == controller.session.id
    assert saved.current_question_index == 10
    assert len(saved.records) == 10
    assert store.data[CANDIDATES_KEY] == "{not json"

    # Once the archive is repaired the same controller can close the interview
    store.remove(CANDIDATES_KEY)
    asyncio.run(controller.finish_interview())

    assert controller.phase == Phase.COMPLETE
    assert controller.result.score_percent == 70
    assert provider.calls["summary"] == 1
    assert CURRENT_SESSION_KEY not in store.data
    assert [r.id for r in SessionPersistence(store).load_results()] == [controller.session.id]


def test_unarchived_session_completes_after_restart(controller, provider, store, jane):
    store.set(CANDIDATES_KEY, "{not json")

    async def scenario():
        await controller.submit_manual_info(jane)
        await _answer(controller, 9)
        with pytest.raises(ArchiveFailure):
            await controller.submit_answer("Last answer.")

    asyncio.run(scenario())
    store.remove(CANDIDATES_KEY)

    restarted = InterviewController(provider, store, tick_interval=FROZEN_TICK)
    saved = restarted.load_saved_session()
    asyncio.run(restarted.resume(saved))

    assert restarted.phase == Phase.COMPLETE
    assert restarted.result.id == saved.id
    assert len(restarted.result.records) == 10
    assert CURRENT_SESSION_KEY not in store.data


def test_finish_interview_requires_all_answers(controller, jane):
    asyncio.run(controller.submit_manual_info(jane))

    with pytest.raises(InvalidTransition):
        asyncio.run(controller.finish_interview())


def test_expiry_with_unreadable_archive_warns(provider, store, jane):
    store.set(CANDIDATES_KEY, "{not json")
    controller = _single_question_controller(provider, store)

    async def scenario():
        await controller.submit_manual_info(jane)
        await controller.timer.wait()

    asyncio.run(scenario())

    warnings = controller.drain_warnings()
    assert len(warnings) == 1
    assert warnings[0].startswith("Candidate archive is unreadable")
    assert controller.phase == Phase.INTERVIEWING
    assert SessionPersistence(store).load_session().current_question_index == 1


def test_unexpected_expiry_error_is_reported(provider, store, jane):
    controller = _single_question_controller(provider, store)

    async def broken_expiry():
        raise RuntimeError("clock went backwards")

    async def scenario():
        await controller.submit_manual_info(jane)
        controller.on_timer_expiry = broken_expiry
        await controller.timer.wait()

    asyncio.run(scenario())

    assert controller.drain_warnings() == ["Unexpected error: clock went backwards"]
