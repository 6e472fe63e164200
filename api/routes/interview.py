"""
Interview API routes.
Wraps the InterviewController for the candidate-facing view.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from api.dependencies import get_controller, http_error
from controller import InterviewController
from errors import InterviewError
from state import CandidateProfile, CandidateResult, InterviewSession, Phase

router = APIRouter(prefix="/api/interview", tags=["interview"])


class CandidateInfoRequest(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""


class DraftRequest(BaseModel):
    text: str


class AnswerRequest(BaseModel):
    answer: str


class CandidateInfo(BaseModel):
    name: str
    email: str
    phone: str


class InterviewStatus(BaseModel):
    session_id: str
    phase: Phase
    candidate: CandidateInfo
    missing_fields: List[str]
    question_number: int
    total_questions: int
    current_question: str
    difficulty: Optional[str] = None
    time_limit: Optional[int] = None
    time_remaining: int
    answered: int
    total_score: int
    draft_answer: str
    busy: bool
    resumable: bool
    result: Optional[CandidateResult] = None
    warnings: List[str]


class SavedSessionResponse(BaseModel):
    available: bool
    session: Optional[InterviewSession] = None


def _status(controller: InterviewController) -> InterviewStatus:
    session = controller.session
    index = session.current_question_index
    profile = session.candidate_profile

    difficulty = None
    if session.phase == Phase.INTERVIEWING and index < controller.total_questions:
        difficulty = controller.orchestrator.difficulty(index).value

    return InterviewStatus(
        session_id=session.id,
        phase=session.phase,
        candidate=CandidateInfo(name=profile.name, email=profile.email, phone=profile.phone),
        missing_fields=controller.missing_fields if session.phase == Phase.COLLECT_INFO else [],
        question_number=min(index + 1, controller.total_questions),
        total_questions=controller.total_questions,
        current_question=session.current_question,
        difficulty=difficulty,
        time_limit=controller.current_time_limit(),
        time_remaining=session.time_remaining,
        answered=len(session.records),
        total_score=session.total_score,
        draft_answer=controller.draft_answer,
        busy=controller.busy,
        resumable=controller.resumable,
        result=controller.result,
        warnings=controller.drain_warnings(),
    )


@router.get("", response_model=InterviewStatus)
async def get_status(controller: InterviewController = Depends(get_controller)):
    """Current phase, question and countdown, plus any queued warnings."""
    return _status(controller)


@router.post("/upload", response_model=InterviewStatus)
async def upload_resume(
    file: UploadFile = File(...),
    controller: InterviewController = Depends(get_controller),
):
    """Upload a PDF or DOCX resume."""
    data = await file.read()
    try:
        await controller.upload_document(data, file.filename or "", file.content_type)
    except InterviewError as error:
        raise http_error(error)
    return _status(controller)


@router.post("/info", response_model=InterviewStatus)
async def submit_info(
    request: CandidateInfoRequest,
    controller: InterviewController = Depends(get_controller),
):
    """Submit the contact details the upload could not find."""
    profile = CandidateProfile(name=request.name, email=request.email, phone=request.phone)
    try:
        await controller.submit_manual_info(profile)
    except InterviewError as error:
        raise http_error(error)
    return _status(controller)


@router.post("/draft")
async def update_draft(
    request: DraftRequest,
    controller: InterviewController = Depends(get_controller),
):
    try:
        controller.update_draft(request.text)
    except InterviewError as error:
        raise http_error(error)
    return {"status": "ok"}


@router.post("/answer", response_model=InterviewStatus)
async def submit_answer(
    request: AnswerRequest,
    controller: InterviewController = Depends(get_controller),
):
    """Submit the answer to the current question."""
    try:
        await controller.submit_answer(request.answer)
    except InterviewError as error:
        raise http_error(error)
    return _status(controller)


@router.post("/complete", response_model=InterviewStatus)
async def finish_interview(controller: InterviewController = Depends(get_controller)):
    """Retry archiving an interview whose last answer is already scored."""
    try:
        await controller.finish_interview()
    except InterviewError as error:
        raise http_error(error)
    return _status(controller)


@router.get("/saved", response_model=SavedSessionResponse)
async def get_saved_session(controller: InterviewController = Depends(get_controller)):
    """The unfinished interview left in storage, if any."""
    saved = controller.load_saved_session()
    return SavedSessionResponse(available=saved is not None, session=saved)


@router.post("/resume", response_model=InterviewStatus)
async def resume_saved_session(controller: InterviewController = Depends(get_controller)):
    saved = controller.load_saved_session()
    if saved is None:
        raise HTTPException(status_code=404, detail={"message": "No saved session"})
    try:
        await controller.resume(saved)
    except InterviewError as error:
        raise http_error(error)
    return _status(controller)


@router.post("/discard", response_model=InterviewStatus)
async def discard_saved_session(controller: InterviewController = Depends(get_controller)):
    """Drop the saved session and start over."""
    controller.reset()
    return _status(controller)


@router.post("/reset", response_model=InterviewStatus)
async def reset_interview(controller: InterviewController = Depends(get_controller)):
    controller.reset()
    return _status(controller)
