"""
Configuration for the Timed Interview Engine.

Environment values are read once from the project .env file. The question
schedule and scoring constants live here as well so that every module agrees
on the same interview shape.
"""
import os
import sys
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv
from loguru import logger

from state import Difficulty

load_dotenv(Path(__file__).parent / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}, using {default}")
        return default


# LLM settings
ANTHROPIC_MODEL = os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-20250514").strip()
TEMPERATURE = float(os.getenv("INTERVIEW_TEMPERATURE", "0.3"))
MAX_TOKENS = _env_int("INTERVIEW_MAX_TOKENS", 1024)

JOB_ROLE = os.getenv("INTERVIEW_JOB_ROLE", "Full Stack Developer (React/Node.js)").strip()

# Storage
DATA_DIR = Path(os.getenv("INTERVIEW_DATA_DIR", str(Path(__file__).parent / "data")))

LOG_LEVEL = os.getenv("INTERVIEW_LOG_LEVEL", "INFO").strip().upper()

# Comma-separated origins allowed to call the API (the web views' dev server by default)
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.getenv(
        "INTERVIEW_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]


# =============================================================================
# QUESTION SCHEDULE
# =============================================================================

QUESTION_TIMERS: Dict[Difficulty, int] = {
    Difficulty.EASY: _env_int("INTERVIEW_EASY_SECONDS", 45),
    Difficulty.MEDIUM: _env_int("INTERVIEW_MEDIUM_SECONDS", 80),
    Difficulty.HARD: _env_int("INTERVIEW_HARD_SECONDS", 145),
}

# 3 Easy, 4 Medium, 3 Hard
QUESTION_CONFIG: List[Difficulty] = (
    [Difficulty.EASY] * 3 + [Difficulty.MEDIUM] * 4 + [Difficulty.HARD] * 3
)

TOTAL_QUESTIONS = len(QUESTION_CONFIG)

SCORE_CONFIG = {
    "max_score_per_question": 10,
    "passing_percentage": 60,
    "excellent_percentage": 80,
}

# Upload limits
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MIN_RESUME_CHARS = 10


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Route loguru output to stderr at the configured level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}",
    )
