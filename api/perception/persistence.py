"""
Durable backends for the session collection.

The collection is only ever addressed as a whole: ``load()`` returns every
session in stored order and ``save()`` replaces the record in one step. A
missing record is an empty collection; an unreadable one is a StorageFault.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .database import Base, build_session_factory
from .errors import StorageFault
from .models import FeedbackCollection
from .schemas import Session, session_list_adapter

COLLECTION_ROW_ID = 1


class Collection(Protocol):
    def load(self) -> list[Session]: ...

    def save(self, sessions: list[Session]) -> None: ...


def decode_sessions(raw: Any, *, source: str) -> list[Session]:
    if not isinstance(raw, list):
        raise StorageFault(f"{source}: expected a list of sessions, got {type(raw).__name__}")
    try:
        return session_list_adapter.validate_python(raw)
    except ValidationError as exc:
        raise StorageFault(f"{source}: invalid session record ({exc.error_count()} errors)") from exc


def encode_sessions(sessions: list[Session]) -> str:
    records = [s.to_record() for s in sessions]
    try:
        return json.dumps(records, indent=2, ensure_ascii=False, allow_nan=False)
    except ValueError as exc:
        raise StorageFault(f"refusing to write non-JSON feedback data: {exc}") from exc


class JsonFileCollection:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> list[Session]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StorageFault(f"{self.path}: unreadable feedback data: {exc}") from exc
        return decode_sessions(raw, source=str(self.path))

    def save(self, sessions: list[Session]) -> None:
        body = encode_sessions(sessions)
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(body)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise StorageFault(f"{self.path}: could not write feedback data: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"JsonFileCollection({str(self.path)!r})"


class SqlCollection:
    def __init__(self, engine: Engine, *, create_schema: bool = True) -> None:
        self.engine = engine
        self.SessionLocal = build_session_factory(engine)
        if create_schema:
            Base.metadata.create_all(engine, tables=[FeedbackCollection.__table__])

    def load(self) -> list[Session]:
        try:
            with self.SessionLocal() as db:
                row = db.execute(
                    text("SELECT payload FROM feedback_collection WHERE id = :id"),
                    {"id": COLLECTION_ROW_ID},
                ).mappings().first()
        except SQLAlchemyError as exc:
            raise StorageFault(f"feedback_collection: read failed: {exc}") from exc
        if not row:
            return []
        try:
            raw = json.loads(row["payload"])
        except (TypeError, json.JSONDecodeError) as exc:
            raise StorageFault(f"feedback_collection: unparsable payload: {exc}") from exc
        return decode_sessions(raw, source="feedback_collection")

    def save(self, sessions: list[Session]) -> None:
        payload = encode_sessions(sessions)
        try:
            with self.SessionLocal() as db:
                updated = db.execute(
                    text(
                        """
                        UPDATE feedback_collection
                        SET payload = :payload, updated_at = CURRENT_TIMESTAMP
                        WHERE id = :id
                        """
                    ),
                    {"id": COLLECTION_ROW_ID, "payload": payload},
                )
                if updated.rowcount == 0:
                    db.execute(
                        text("INSERT INTO feedback_collection (id, payload) VALUES (:id, :payload)"),
                        {"id": COLLECTION_ROW_ID, "payload": payload},
                    )
                db.commit()
        except SQLAlchemyError as exc:
            raise StorageFault(f"feedback_collection: write failed: {exc}") from exc

    def __repr__(self) -> str:
        return f"SqlCollection({self.engine.url.render_as_string(hide_password=True)!r})"
