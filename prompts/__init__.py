"""
Prompt templates for the provider adapter.
"""
from .contact_prompt import build_contact_request, get_contact_system_prompt
from .evaluation_prompt import build_evaluation_request, get_evaluation_system_prompt
from .question_prompt import build_question_request, get_question_system_prompt
from .summary_prompt import build_summary_request, get_summary_system_prompt

__all__ = [
    "build_contact_request",
    "get_contact_system_prompt",
    "build_evaluation_request",
    "get_evaluation_system_prompt",
    "build_question_request",
    "get_question_system_prompt",
    "build_summary_request",
    "get_summary_system_prompt",
]
