"""
Agent modules for the Timed Interview Engine.
"""
from .contact_extractor import ContactInfo, extract_contact_info
from .evaluator import AnswerEvaluator, Evaluation
from .interviewer import GeneratedQuestion, QuestionOrchestrator
from .summarizer import Summary, SummaryGenerator

__all__ = [
    "AnswerEvaluator",
    "ContactInfo",
    "Evaluation",
    "GeneratedQuestion",
    "QuestionOrchestrator",
    "Summary",
    "SummaryGenerator",
    "extract_contact_info",
]
