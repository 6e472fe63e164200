"""
Score aggregation. Pure functions of the record sequence.
"""
import math
from typing import Iterable

from config import SCORE_CONFIG, TOTAL_QUESTIONS
from state import QuestionRecord


def total_score(records: Iterable[QuestionRecord]) -> int:
    return sum(r.score for r in records)


def max_points(question_count: int = TOTAL_QUESTIONS) -> int:
    return question_count * SCORE_CONFIG["max_score_per_question"]


def calculate_final_score(total: int, question_count: int = TOTAL_QUESTIONS) -> int:
    """Percentage of the maximum possible points, rounded half up."""
    maximum = max_points(question_count)
    if maximum <= 0:
        return 0
    return int(math.floor(total * 100 / maximum + 0.5))


def get_score_category(percentage: int) -> str:
    if percentage >= SCORE_CONFIG["excellent_percentage"]:
        return "Excellent"
    if percentage >= SCORE_CONFIG["passing_percentage"]:
        return "Good"
    return "Needs Improvement"


def is_passing_score(percentage: int) -> bool:
    return percentage >= SCORE_CONFIG["passing_percentage"]
