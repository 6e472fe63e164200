"""
Process-wide controller shared by the routes.

One interview is active per process. Tests swap the controller through
app.dependency_overrides[get_controller].
"""
from typing import Optional

from fastapi import HTTPException

import config
from controller import InterviewController
from errors import (
    ArchiveFailure,
    EvaluationFailure,
    ExtractionFailure,
    InterviewError,
    ProviderError,
    ValidationFailure,
)
from llm_provider import AnthropicProvider
from persistence import JsonFileStore

_controller: Optional[InterviewController] = None


def get_controller() -> InterviewController:
    global _controller
    if _controller is None:
        _controller = InterviewController(
            provider=AnthropicProvider(),
            store=JsonFileStore(config.DATA_DIR),
        )
    return _controller


def http_error(error: InterviewError) -> HTTPException:
    """Map an engine error onto the HTTP status the web views expect."""
    if isinstance(error, ValidationFailure):
        return HTTPException(
            status_code=422,
            detail={"message": str(error), "missing_fields": error.missing_fields},
        )
    if isinstance(error, ExtractionFailure):
        return HTTPException(
            status_code=400,
            detail={"message": error.message, "kind": error.kind.value},
        )
    if isinstance(error, (EvaluationFailure, ProviderError)):
        return HTTPException(
            status_code=502,
            detail={"message": error.message, "kind": error.kind.value},
        )
    if isinstance(error, ArchiveFailure):
        return HTTPException(
            status_code=503,
            detail={"message": str(error), "retry": "/api/interview/complete"},
        )
    # InvalidTransition and SessionBusy
    return HTTPException(status_code=409, detail={"message": str(error)})
