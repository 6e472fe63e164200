"""
Validation helpers for candidate info, uploads and answers.
"""
import re
from typing import List, NamedTuple, Optional

from config import MAX_UPLOAD_BYTES
from state import CandidateProfile

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PDF = "pdf"
DOCX = "docx"


class ValidationResult(NamedTuple):
    is_valid: bool
    missing_fields: List[str]


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def validate_candidate_info(profile: CandidateProfile) -> ValidationResult:
    """
    Check that name, email and phone are present and the email is well-formed.

    Returns the list of missing/invalid markers in form order. A present but
    malformed email is reported as "Valid Email".
    """
    missing = []

    if not profile.name.strip():
        missing.append("Name")

    if not profile.email.strip():
        missing.append("Email")
    elif not is_valid_email(profile.email.strip()):
        missing.append("Valid Email")

    if not profile.phone.strip():
        missing.append("Phone")

    return ValidationResult(is_valid=not missing, missing_fields=missing)


def detect_file_type(filename: str, content_type: Optional[str] = None) -> Optional[str]:
    """Return "pdf", "docx" or None for anything else."""
    name = (filename or "").lower()
    mime = (content_type or "").lower()

    if name.endswith(".pdf") or "pdf" in mime:
        return PDF
    if name.endswith(".docx") or "wordprocessingml" in mime:
        return DOCX
    return None


def validate_file(filename: str, size: int, content_type: Optional[str] = None) -> ValidationResult:
    if detect_file_type(filename, content_type) is None:
        return ValidationResult(False, ["Please upload a PDF or DOCX file"])
    if size > MAX_UPLOAD_BYTES:
        return ValidationResult(False, ["File size must be less than 10MB"])
    return ValidationResult(True, [])


def is_valid_answer(answer: Optional[str]) -> bool:
    return bool(answer and answer.strip())
