import json
import uuid

import pytest

from perception.errors import SessionNotFound, SessionValidationError
from perception.persistence import JsonFileCollection
from perception.store import FeedbackStore, open_store


def _store(tmp_path) -> FeedbackStore:
    return FeedbackStore(JsonFileCollection(tmp_path / "feedback.json"))


def test_create_session_returns_fresh_ids_and_is_not_completed(tmp_path):
    store = _store(tmp_path)

    ids = [store.create_session(f"user-{i}") for i in range(5)]

    assert len(set(ids)) == 5
    assert all(str(uuid.UUID(sid)) == sid for sid in ids)
    assert store.list_completed() == []
    assert [s.id for s in store.list_sessions()] == ids


def test_create_session_persists_before_returning(tmp_path):
    store = _store(tmp_path)
    sid = store.create_session("Alex")

    raw = json.loads((tmp_path / "feedback.json").read_text(encoding="utf-8"))
    assert raw == [
        {
            "id": sid,
            "name": "Alex",
            "answers": {},
            "completed": False,
            "lastUpdated": raw[0]["lastUpdated"],
        }
    ]


@pytest.mark.parametrize("name", [None, "", "   "])
def test_missing_or_blank_name_defaults_to_anonymous(tmp_path, name):
    store = _store(tmp_path)
    sid = store.create_session(name)
    assert store.get_session(sid).name == "Anonymous"


def test_name_is_stripped(tmp_path):
    store = _store(tmp_path)
    sid = store.create_session("  Sam  ")
    assert store.get_session(sid).name == "Sam"


def test_save_answer_overwrites_and_refreshes_timestamp(tmp_path):
    store = _store(tmp_path)
    sid = store.create_session("Alex")
    created_at = store.get_session(sid).last_updated

    store.save_answer(sid, "confidence", 6)
    store.save_answer(sid, "advice", "Talk less, listen more")
    store.save_answer(sid, "confidence", 8)

    session = store.get_session(sid)
    assert session.answers == {"confidence": 8, "advice": "Talk less, listen more"}
    assert session.last_updated >= created_at
    assert session.completed is False


def test_save_answer_unknown_session_is_not_found_and_does_not_rewrite(tmp_path):
    store = _store(tmp_path)
    store.create_session("Alex")
    path = tmp_path / "feedback.json"
    before = path.read_bytes()
    before_mtime = path.stat().st_mtime_ns

    with pytest.raises(SessionNotFound):
        store.save_answer("does-not-exist", "confidence", 5)

    assert path.read_bytes() == before
    assert path.stat().st_mtime_ns == before_mtime


def test_save_answer_on_empty_store_does_not_create_file(tmp_path):
    store = _store(tmp_path)
    with pytest.raises(SessionNotFound):
        store.save_answer("missing", "q", "a")
    assert not (tmp_path / "feedback.json").exists()


@pytest.mark.parametrize(
    "answer",
    [True, None, {"nested": 1}, ["ok", 3], [["a"]], float("nan"), float("inf"), float("-inf")],
)
def test_save_answer_rejects_values_outside_answer_shapes(tmp_path, answer):
    store = _store(tmp_path)
    sid = store.create_session("Alex")

    with pytest.raises(SessionValidationError):
        store.save_answer(sid, "q1", answer)

    assert store.get_session(sid).answers == {}


def test_save_answer_requires_question_id(tmp_path):
    store = _store(tmp_path)
    sid = store.create_session("Alex")
    with pytest.raises(SessionValidationError):
        store.save_answer(sid, "  ", "x")
    with pytest.raises(SessionValidationError):
        store.save_answer(sid, None, "x")


def test_save_answer_keeps_question_id_verbatim(tmp_path):
    store = _store(tmp_path)
    sid = store.create_session("Alex")

    store.save_answer(sid, " q ", "padded")
    store.save_answer(sid, "q", "plain")

    assert store.get_session(sid).answers == {" q ": "padded", "q": "plain"}


def test_rejected_non_finite_answer_leaves_file_as_valid_json(tmp_path):
    store = _store(tmp_path)
    sid = store.create_session("Alex")
    store.save_answer(sid, "confidence", 7.5)

    with pytest.raises(SessionValidationError):
        store.save_answer(sid, "confidence", float("nan"))

    raw = json.loads((tmp_path / "feedback.json").read_text(encoding="utf-8"))
    assert raw[0]["answers"] == {"confidence": 7.5}


def test_complete_session_is_idempotent(tmp_path):
    store = _store(tmp_path)
    sid = store.create_session("Alex")
    store.save_answer(sid, "personality", ["curious", "direct"])

    store.complete_session(sid)
    first = store.get_session(sid)
    store.complete_session(sid)
    second = store.get_session(sid)

    assert second.completed is True
    assert second.answers == first.answers
    assert second.last_updated >= first.last_updated
    assert [s.id for s in store.list_completed()] == [sid]


def test_complete_unknown_session_is_not_found(tmp_path):
    store = _store(tmp_path)
    with pytest.raises(SessionNotFound):
        store.complete_session("nope")


def test_completed_session_still_accepts_answers(tmp_path):
    store = _store(tmp_path)
    sid = store.create_session("Alex")
    store.complete_session(sid)

    store.save_answer(sid, "advice", "late thought")

    session = store.get_session(sid)
    assert session.completed is True
    assert session.answers["advice"] == "late thought"


def test_list_completed_keeps_creation_order(tmp_path):
    store = _store(tmp_path)
    a = store.create_session("A")
    b = store.create_session("B")
    c = store.create_session("C")
    store.complete_session(c)
    store.complete_session(a)

    assert [s.id for s in store.list_completed()] == [a, c]
    assert b not in {s.id for s in store.list_completed()}


def test_state_survives_a_new_store_instance(tmp_path):
    sid = _store(tmp_path).create_session("Alex")
    _store(tmp_path).save_answer(sid, "confidence", 7)

    reopened = _store(tmp_path)
    assert reopened.get_session(sid).answers == {"confidence": 7}


def test_get_session_unknown_is_not_found(tmp_path):
    with pytest.raises(SessionNotFound):
        _store(tmp_path).get_session("missing")


def test_open_store_file_and_sql_backends(tmp_path):
    file_store = open_store("file", data_file=tmp_path / "a.json")
    sql_store = open_store("sql", database_url=f"sqlite:///{tmp_path / 'a.db'}")

    for store in (file_store, sql_store):
        sid = store.create_session("Alex")
        store.complete_session(sid)
        assert [s.id for s in store.list_completed()] == [sid]


def test_open_store_rejects_unknown_backend(tmp_path):
    with pytest.raises(ValueError):
        open_store("redis", data_file=tmp_path / "x.json")
