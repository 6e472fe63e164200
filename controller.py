"""
Interview session controller for the Timed Interview Engine.

Flow:
1. Upload (or manual entry) produces a complete candidate profile
2. The orchestrator fetches a question and the countdown starts
3. A submission or the countdown's expiry stops the clock; the evaluator
   scores the answer
4. The record is appended and the index advances, until the schedule is
   exhausted
5. The summary is generated, the result archived and the snapshot cleared

Exactly one session is active at a time. While a provider call for it is
outstanding no other mutating event is accepted, and responses that arrive
after a reset are dropped because the session id no longer matches.
"""
import asyncio
from contextlib import contextmanager
from typing import Iterator, List, Optional

from loguru import logger

import transitions
from agents import (
    AnswerEvaluator,
    ContactInfo,
    QuestionOrchestrator,
    SummaryGenerator,
    extract_contact_info,
)
from documents import DocumentTextExtractor
from errors import (
    ArchiveFailure,
    EvaluationFailure,
    InterviewError,
    InvalidTransition,
    ProviderError,
    SessionBusy,
    ValidationFailure,
)
from llm_provider import AIProvider
from persistence import KeyValueStore, SessionPersistence
from scoring import calculate_final_score, max_points
from state import CandidateProfile, CandidateResult, InterviewSession, Phase, QuestionRecord
from timer import CountdownTimer
from validation import is_valid_answer, validate_candidate_info

EXPIRED_ANSWER = "No answer provided (time expired)"


def _clean_profile(profile: CandidateProfile) -> CandidateProfile:
    return profile.model_copy(update={
        "name": profile.name.strip(),
        "email": profile.email.strip(),
        "phone": profile.phone.strip(),
    })


class InterviewController:
    """
    The only object a presentation layer talks to.

    Entry points: upload_document / submit_upload, submit_manual_info,
    update_draft, submit_answer, on_timer_expiry, finish_interview, resume,
    reset.
    """

    def __init__(
        self,
        provider: AIProvider,
        store: KeyValueStore,
        extractor: Optional[DocumentTextExtractor] = None,
        orchestrator: Optional[QuestionOrchestrator] = None,
        tick_interval: float = 1.0,
    ):
        self.provider = provider
        self.persistence = SessionPersistence(store)
        self.extractor = extractor or DocumentTextExtractor()
        self.orchestrator = orchestrator or QuestionOrchestrator(provider)
        self.evaluator = AnswerEvaluator(provider)
        self.summarizer = SummaryGenerator(provider)
        self.tick_interval = tick_interval

        self.session: InterviewSession = transitions.new_session()
        self.draft_answer = ""
        self.result: Optional[CandidateResult] = None
        self.timer: Optional[CountdownTimer] = None
        self.resumable = True
        self._warnings: List[str] = []
        self._busy_session_id: Optional[str] = None
        self._pending_result: Optional[CandidateResult] = None

    # =========================================================================
    # STATUS
    # =========================================================================

    @property
    def phase(self) -> Phase:
        return self.session.phase

    @property
    def busy(self) -> bool:
        return self._busy_session_id is not None and self._busy_session_id == self.session.id

    @property
    def total_questions(self) -> int:
        return self.orchestrator.total_questions

    @property
    def missing_fields(self) -> List[str]:
        return validate_candidate_info(self.session.candidate_profile).missing_fields

    def current_time_limit(self) -> Optional[int]:
        if self.phase != Phase.INTERVIEWING or self.session.current_question_index >= self.total_questions:
            return None
        return self.orchestrator.time_limit(self.session.current_question_index)

    def drain_warnings(self) -> List[str]:
        warnings, self._warnings = self._warnings, []
        return warnings

    def snapshot(self) -> str:
        return self.persistence.dump_session(self.session)

    def load_saved_session(self) -> Optional[InterviewSession]:
        return self.persistence.load_session()

    # =========================================================================
    # UPLOAD / CANDIDATE INFO
    # =========================================================================

    async def upload_document(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ) -> InterviewSession:
        """
        Extract resume text and contact details, then hand off to submit_upload.

        Raises:
            ExtractionFailure: the document is unusable; the phase is unchanged
            SessionBusy: an upload for this session is already being processed
        """
        self._require_phase(Phase.UPLOAD, Phase.COLLECT_INFO)
        self._require_idle()

        with self._in_flight() as session_id:
            # Parsing is CPU-bound; keep the event loop and any countdown running
            resume_text = await asyncio.to_thread(self.extractor.extract, data, filename, content_type)
            if self._is_stale(session_id):
                return self.session

            try:
                info = await extract_contact_info(self.provider, resume_text)
            except ProviderError:
                self._warn("API Limit Exceeded! Please fill in your information manually.")
                info = ContactInfo()

        if self._is_stale(session_id):
            logger.info("Dropping contact extraction for a session that was reset")
            return self.session

        profile = CandidateProfile(
            name=info.name,
            email=info.email,
            phone=info.phone,
            resume_text=resume_text,
        )
        return await self.submit_upload(profile)

    async def submit_upload(self, profile: CandidateProfile) -> InterviewSession:
        """Start straight away if the extracted profile is complete, else collect info."""
        self._require_phase(Phase.UPLOAD, Phase.COLLECT_INFO)
        self._require_idle()

        profile = _clean_profile(profile)
        validation = validate_candidate_info(profile)
        if not validation.is_valid:
            logger.info(f"Upload is missing: {', '.join(validation.missing_fields)}")
            self.session = transitions.collect_info(self.session, profile)
            return self.session

        logger.info("All contact information found, starting interview")
        return await self._begin(profile)

    async def submit_manual_info(self, profile: CandidateProfile) -> InterviewSession:
        """
        Raises:
            ValidationFailure: name, email or phone missing, or email malformed
        """
        self._require_phase(Phase.UPLOAD, Phase.COLLECT_INFO)
        self._require_idle()

        profile = _clean_profile(profile)
        if not profile.resume_text:
            profile = profile.model_copy(
                update={"resume_text": self.session.candidate_profile.resume_text}
            )

        validation = validate_candidate_info(profile)
        if not validation.is_valid:
            raise ValidationFailure(validation.missing_fields)

        return await self._begin(profile)

    # =========================================================================
    # ANSWERS
    # =========================================================================

    def update_draft(self, text: str) -> None:
        """Mirror the answer field so an expiry can submit what was typed."""
        self._require_phase(Phase.INTERVIEWING)
        self.draft_answer = text

    async def submit_answer(self, text: str) -> InterviewSession:
        """
        Score a manual submission and move on. Blank text is ignored.

        Raises:
            EvaluationFailure: no record was produced; the question stays
                pending and the countdown continues from where it stopped
        """
        self._require_phase(Phase.INTERVIEWING)
        self._require_idle()
        if not self.session.current_question:
            raise SessionBusy("The question is not ready yet")
        if not is_valid_answer(text):
            logger.debug("Ignoring empty answer")
            return self.session

        # Must happen before the evaluation call starts
        self._cancel_timer()

        limit = self.orchestrator.time_limit(self.session.current_question_index)
        time_used = limit - self.session.time_remaining
        return await self._resolve_question(text, time_used, restart_on_failure=True)

    async def on_timer_expiry(self) -> InterviewSession:
        """
        Auto-submit the draft (or the expiry placeholder) with the full time
        limit recorded. Ignored while a provider call is in flight.
        """
        self._require_phase(Phase.INTERVIEWING)
        if self.busy or not self.session.current_question:
            logger.debug("Expiry ignored, a provider call is in flight")
            return self.session

        self._cancel_timer()

        answer = self.draft_answer if self.draft_answer.strip() else EXPIRED_ANSWER
        limit = self.orchestrator.time_limit(self.session.current_question_index)
        logger.info(f"Time is up on question {self.session.current_question_index + 1}, auto-submitting")
        return await self._resolve_question(answer, limit, restart_on_failure=False)

    # =========================================================================
    # RESUME / RESET
    # =========================================================================

    async def resume(self, persisted: InterviewSession) -> InterviewSession:
        """
        Restore a saved session verbatim and continue it.

        The countdown restarts from the saved remaining time. A snapshot taken
        while a question was being generated asks for that question again.
        """
        self._require_phase(Phase.UPLOAD)
        self._require_idle()
        if persisted.phase == Phase.COMPLETE:
            raise InvalidTransition("A completed interview cannot be resumed")
        if persisted.current_question_index > self.total_questions:
            raise InvalidTransition("Saved session does not fit the question schedule")

        self._cancel_timer()
        self.session = persisted
        self.draft_answer = ""
        self.result = None
        logger.info(
            f"Resumed session {persisted.id} at question {persisted.current_question_index + 1} "
            f"with {persisted.time_remaining}s remaining"
        )

        if persisted.phase != Phase.INTERVIEWING:
            return self.session

        if persisted.current_question and persisted.current_question_index < self.total_questions:
            self._start_timer(remaining=persisted.time_remaining)
            return self.session

        with self._in_flight() as session_id:
            if persisted.current_question_index >= self.total_questions:
                await self._complete(session_id)
            else:
                await self._ask_question(session_id)
        return self.session

    async def finish_interview(self) -> InterviewSession:
        """
        Retry closing an interview whose questions are all answered but whose
        result could not be archived.

        Raises:
            ArchiveFailure: the archive is still unreadable or unwritable
        """
        self._require_phase(Phase.INTERVIEWING)
        self._require_idle()
        if self.session.current_question_index < self.total_questions:
            raise InvalidTransition("Questions remain; the interview is not finished")

        with self._in_flight() as session_id:
            await self._complete(session_id)
        return self.session

    def reset(self) -> InterviewSession:
        """Discard the active session from any phase and return to Upload."""
        self._cancel_timer()
        self.timer = None
        self.persistence.clear_session()
        self.session = transitions.new_session()
        self.draft_answer = ""
        self.result = None
        self.resumable = True
        self._warnings = []
        self._pending_result = None
        logger.info("Session reset")
        return self.session

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _begin(self, profile: CandidateProfile) -> InterviewSession:
        self._set_session(transitions.begin_interview(self.session, profile))
        self.draft_answer = ""
        self.result = None
        logger.info(f"Interview started for {profile.name} ({self.total_questions} questions)")

        with self._in_flight() as session_id:
            await self._ask_question(session_id)
        return self.session

    async def _ask_question(self, session_id: str) -> None:
        index = self.session.current_question_index
        generated = await self.orchestrator.generate_next(
            index, self.session.candidate_profile, list(self.session.questions_asked)
        )
        if self._is_stale(session_id):
            logger.info("Dropping generated question for a session that was reset")
            return

        if generated.warning:
            self._warn(generated.warning)
        self._set_session(
            transitions.present_question(self.session, generated.question, generated.time_limit)
        )
        self._start_timer()

    async def _resolve_question(
        self,
        answer: str,
        time_used: int,
        restart_on_failure: bool,
    ) -> InterviewSession:
        session = self.session
        index = session.current_question_index
        difficulty = self.orchestrator.difficulty(index)

        with self._in_flight() as session_id:
            try:
                evaluation = await self.evaluator.evaluate(session.current_question, answer, difficulty)
            except EvaluationFailure:
                if self._is_stale(session_id):
                    logger.info("Dropping failed evaluation for a session that was reset")
                    return self.session
                logger.error(f"Evaluation failed on question {index + 1}, awaiting retry")
                if restart_on_failure and self.session.time_remaining > 0:
                    self._start_timer(remaining=self.session.time_remaining)
                raise

            if self._is_stale(session_id):
                logger.info("Dropping evaluation for a session that was reset")
                return self.session

            if evaluation.fallback:
                self._warn("API Limit Exceeded! Using default score of 5/10 for this answer.")

            record = QuestionRecord(
                question_number=index + 1,
                difficulty=difficulty,
                question=session.current_question,
                answer=answer,
                score=evaluation.score,
                feedback=evaluation.feedback,
                time_used_seconds=max(0, time_used),
            )
            self._set_session(transitions.record_answer(self.session, record))
            self.draft_answer = ""

            if self.session.current_question_index >= self.total_questions:
                await self._complete(session_id)
            else:
                await self._ask_question(session_id)

        return self.session

    async def _complete(self, session_id: str) -> None:
        """
        Summarize, archive, then close the session. If archiving fails the
        session stays in Interviewing with its snapshot intact, and
        finish_interview (or a resume) retries without a second summary call.
        """
        self._cancel_timer()

        result = self._pending_result
        if result is None or result.id != self.session.id:
            total = self.session.total_score
            final_percent = calculate_final_score(total, self.total_questions)
            summary = await self.summarizer.summarize(
                self.session.candidate_profile, self.session.records, final_percent
            )
            if self._is_stale(session_id):
                logger.info("Dropping summary for a session that was reset")
                return

            if summary.warning:
                self._warn(summary.warning)

            result = CandidateResult(
                id=self.session.id,
                candidate_profile=self.session.candidate_profile,
                records=self.session.records,
                score_percent=final_percent,
                total_points=total,
                max_points=max_points(self.total_questions),
                ai_summary=summary.text,
            )
            self._pending_result = result

        try:
            self.persistence.append_result(result)
        except ArchiveFailure:
            logger.error(f"Could not archive session {result.id}, keeping it resumable")
            raise

        self._set_session(transitions.complete(self.session))
        self.persistence.clear_session()
        self.result = result
        self._pending_result = None
        logger.info(f"Interview complete: {result.score_percent}% ({result.total_points}/{result.max_points})")

    def _start_timer(self, remaining: Optional[int] = None) -> None:
        self._cancel_timer()
        limit = self.orchestrator.time_limit(self.session.current_question_index)
        self.timer = CountdownTimer(
            limit,
            on_expire=self._handle_expiry,
            on_tick=self._handle_tick,
            remaining=remaining,
            interval=self.tick_interval,
        )
        self.timer.start()

    def _cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()

    def _handle_tick(self, remaining: int) -> None:
        if self.phase == Phase.INTERVIEWING:
            self._set_session(transitions.tick(self.session, remaining))

    async def _handle_expiry(self) -> None:
        try:
            await self.on_timer_expiry()
        except EvaluationFailure as error:
            self._warn(f"Error evaluating answer: {error.message}")
        except InterviewError as error:
            self._warn(str(error))
        except Exception as error:
            # Nothing awaits the countdown task, so this is the last chance to report
            logger.exception("Unexpected error while handling timer expiry")
            self._warn(f"Unexpected error: {error}")

    def _set_session(self, session: InterviewSession) -> None:
        self.session = session
        if session.phase != Phase.INTERVIEWING:
            return

        saved = self.persistence.save_session(session)
        if not saved and self.resumable:
            self._warn("Progress could not be saved; this interview cannot be resumed after a restart.")
        self.resumable = saved

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self._warnings.append(message)

    def _is_stale(self, session_id: str) -> bool:
        return self.session.id != session_id

    def _require_phase(self, *phases: Phase) -> None:
        if self.phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise InvalidTransition(f"Not allowed in phase '{self.phase.value}' (expected {allowed})")

    def _require_idle(self) -> None:
        if self.busy:
            raise SessionBusy("Please wait for the current request to finish")

    @contextmanager
    def _in_flight(self) -> Iterator[str]:
        session_id = self.session.id
        self._busy_session_id = session_id
        try:
            yield session_id
        finally:
            if self._busy_session_id == session_id:
                self._busy_session_id = None
