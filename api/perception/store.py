import logging
import threading
import uuid
from pathlib import Path
from typing import Any, Callable, TypeVar

from pydantic import ValidationError

from .config import DATA_FILE, DATABASE_URL, DEFAULT_SESSION_NAME, STORE_BACKEND
from .database import build_engine
from .errors import SessionNotFound, SessionValidationError
from .persistence import Collection, JsonFileCollection, SqlCollection
from .schemas import Session, answer_value_adapter, now_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _find(sessions: list[Session], session_id: str) -> Session:
    for session in sessions:
        if session.id == session_id:
            return session
    raise SessionNotFound(session_id)


class FeedbackStore:
    """Session collection with serialized load-modify-save mutations.

    Every mutating call holds ``_lock`` while it loads the whole collection,
    changes it in memory and writes it back. Reads skip the lock and see the
    last completed write.
    """

    def __init__(self, collection: Collection, *, default_name: str = DEFAULT_SESSION_NAME) -> None:
        self.collection = collection
        self.default_name = default_name
        self._lock = threading.Lock()

    def _mutate(self, change: Callable[[list[Session]], T]) -> T:
        with self._lock:
            sessions = self.collection.load()
            result = change(sessions)
            self.collection.save(sessions)
            return result

    def create_session(self, name: str | None = None) -> str:
        safe_name = str(name or "").strip() or self.default_name
        session = Session(
            id=str(uuid.uuid4()),
            name=safe_name,
            answers={},
            completed=False,
            last_updated=now_utc(),
        )

        def _append(sessions: list[Session]) -> str:
            sessions.append(session)
            return session.id

        session_id = self._mutate(_append)
        logger.info("[store] session created id=%s name=%s", session_id, safe_name)
        return session_id

    def save_answer(self, session_id: str, question_id: str, answer: Any) -> None:
        # Keys are stored exactly as given; " q" and "q" are different questions.
        if not isinstance(question_id, str) or not question_id.strip():
            raise SessionValidationError("questionId is required")
        try:
            value = answer_value_adapter.validate_python(answer)
        except ValidationError as exc:
            raise SessionValidationError(
                f"answer for {question_id} must be a string, a finite number, or a list of strings"
            ) from exc

        def _set(sessions: list[Session]) -> None:
            session = _find(sessions, session_id)
            session.answers[question_id] = value
            session.last_updated = now_utc()

        self._mutate(_set)
        logger.debug("[store] answer saved session=%s question=%s", session_id, question_id)

    def complete_session(self, session_id: str) -> None:
        def _complete(sessions: list[Session]) -> bool:
            session = _find(sessions, session_id)
            already = session.completed
            session.completed = True
            session.last_updated = now_utc()
            return already

        already = self._mutate(_complete)
        if already:
            logger.debug("[store] session already completed id=%s", session_id)
        else:
            logger.info("[store] session completed id=%s", session_id)

    def get_session(self, session_id: str) -> Session:
        return _find(self.collection.load(), session_id)

    def list_sessions(self) -> list[Session]:
        return self.collection.load()

    def list_completed(self) -> list[Session]:
        return [s for s in self.collection.load() if s.completed]


def open_store(
    backend: str | None = None,
    *,
    data_file: Path | str | None = None,
    database_url: str | None = None,
) -> FeedbackStore:
    kind = (backend or STORE_BACKEND).strip().lower()
    if kind == "file":
        collection: Collection = JsonFileCollection(data_file or DATA_FILE)
    elif kind == "sql":
        collection = SqlCollection(build_engine(database_url or DATABASE_URL))
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {kind!r} (expected 'file' or 'sql')")
    logger.info("[store] using %r", collection)
    return FeedbackStore(collection)
