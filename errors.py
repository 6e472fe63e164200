"""
Error taxonomy for the interview engine.

Every failure the controller can surface is one of these. Provider failures
carry an explicit kind assigned at the adapter boundary, so nothing past the
adapter ever looks at an error message to decide what to do.
"""
from enum import Enum
from typing import List, Optional


class ProviderErrorKind(str, Enum):
    QUOTA_EXCEEDED = "quota_exceeded"
    GENERIC = "generic"


class ExtractionErrorKind(str, Enum):
    UNSUPPORTED_FORMAT = "unsupported_format"
    TOO_LARGE = "too_large"
    EMPTY_OR_IMAGE_ONLY = "empty_or_image_only"
    CORRUPTED = "corrupted"


class InterviewError(Exception):
    """Base class for all interview engine errors."""


class ExtractionFailure(InterviewError):
    """The uploaded document could not be turned into resume text."""

    def __init__(self, kind: ExtractionErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class ValidationFailure(InterviewError):
    """Candidate info is incomplete or malformed."""

    def __init__(self, missing_fields: List[str]):
        super().__init__(f"Please fill in all required fields: {', '.join(missing_fields)}")
        self.missing_fields = list(missing_fields)


class ProviderError(InterviewError):
    """An AI provider call failed."""

    def __init__(self, kind: ProviderErrorKind, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def is_quota_exceeded(self) -> bool:
        return self.kind == ProviderErrorKind.QUOTA_EXCEEDED


class EvaluationFailure(ProviderError):
    """
    A non-quota evaluation failure. No record is produced; the question stays
    pending until the caller retries the submission.
    """


class InvalidTransition(InterviewError):
    """The current phase does not accept this event."""


class SessionBusy(InvalidTransition):
    """A provider call for the active session is still outstanding."""


class ArchiveFailure(InterviewError):
    """
    The candidate archive could not be read or written. The finished session
    stays resumable until archiving succeeds.
    """
