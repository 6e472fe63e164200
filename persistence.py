"""
Session persistence over a key-value store.

Two slots: the append-only archive of completed results and the snapshot of
the active session. Snapshot writes are best-effort; a failed write means the
session is not resumable, never that the interview stops.
"""
import json
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from loguru import logger
from pydantic import ValidationError

from errors import ArchiveFailure
from state import CandidateResult, InterviewSession

CANDIDATES_KEY = "interview_candidates"
CURRENT_SESSION_KEY = "interview_current_session"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStore:
    """In-process store for tests and throwaway runs."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """One UTF-8 JSON file per key inside a data directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(value)
        tmp_path.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class SessionPersistence:
    def __init__(self, store: KeyValueStore):
        self.store = store

    # =========================================================================
    # ACTIVE SESSION SNAPSHOT
    # =========================================================================

    @staticmethod
    def dump_session(session: InterviewSession) -> str:
        return session.model_dump_json()

    def save_session(self, session: InterviewSession) -> bool:
        """Overwrite the snapshot. Returns False if the write failed."""
        try:
            self.store.set(CURRENT_SESSION_KEY, self.dump_session(session))
        except Exception as exc:
            logger.warning(f"Could not save session snapshot: {exc}")
            return False
        return True

    def load_session(self) -> Optional[InterviewSession]:
        try:
            raw = self.store.get(CURRENT_SESSION_KEY)
        except OSError as exc:
            logger.warning(f"Could not read session snapshot: {exc}")
            return None
        if not raw:
            return None
        try:
            return InterviewSession.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning(f"Discarding unreadable session snapshot: {exc.error_count()} errors")
            return None

    def clear_session(self) -> None:
        try:
            self.store.remove(CURRENT_SESSION_KEY)
        except OSError as exc:
            logger.warning(f"Could not clear session snapshot: {exc}")

    # =========================================================================
    # ARCHIVE
    # =========================================================================

    def _read_results(self) -> List[CandidateResult]:
        raw = self.store.get(CANDIDATES_KEY)
        if not raw:
            return []
        return [CandidateResult.model_validate(item) for item in json.loads(raw)]

    def load_results(self) -> List[CandidateResult]:
        try:
            return self._read_results()
        except (json.JSONDecodeError, ValidationError, TypeError, OSError) as exc:
            logger.error(f"Candidate archive is unreadable: {exc}")
            return []

    def append_result(self, result: CandidateResult) -> None:
        """
        Add a result to the archive. Appending the same result id twice is a
        no-op.

        Raises:
            ArchiveFailure: the archive is unreadable (it is never overwritten)
                or the write failed
        """
        try:
            results = self._read_results()
        except (json.JSONDecodeError, ValidationError, TypeError, OSError) as exc:
            raise ArchiveFailure(f"Candidate archive is unreadable: {exc}") from exc

        if any(r.id == result.id for r in results):
            logger.debug(f"Result {result.id} already archived")
            return

        results.append(result)
        payload = [r.model_dump(mode="json") for r in results]
        try:
            self.store.set(CANDIDATES_KEY, json.dumps(payload, indent=2))
        except OSError as exc:
            raise ArchiveFailure(f"Could not write candidate archive: {exc}") from exc
        logger.info(f"Archived result {result.id} ({result.score_percent}%)")

    def get_result(self, result_id: str) -> Optional[CandidateResult]:
        for result in self.load_results():
            if result.id == result_id:
                return result
        return None
