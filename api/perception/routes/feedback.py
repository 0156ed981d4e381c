from fastapi import APIRouter, Depends

from ..deps import call_store, get_store
from ..schemas import (
    CompleteSessionRequest,
    SaveAnswerRequest,
    Session,
    StartSessionRequest,
    StartSessionResponse,
    SuccessResponse,
)
from ..store import FeedbackStore

router = APIRouter()


@router.post("/start-session", response_model=StartSessionResponse, response_model_by_alias=True)
def start_session(
    payload: StartSessionRequest | None = None,
    store: FeedbackStore = Depends(get_store),
) -> StartSessionResponse:
    name = payload.name if payload else None
    session_id = call_store(lambda: store.create_session(name))
    return StartSessionResponse(session_id=session_id)


@router.post("/save-answer", response_model=SuccessResponse)
def save_answer(payload: SaveAnswerRequest, store: FeedbackStore = Depends(get_store)) -> SuccessResponse:
    call_store(lambda: store.save_answer(payload.session_id, payload.question_id, payload.answer))
    return SuccessResponse()


@router.post("/complete-session", response_model=SuccessResponse)
def complete_session(payload: CompleteSessionRequest, store: FeedbackStore = Depends(get_store)) -> SuccessResponse:
    call_store(lambda: store.complete_session(payload.session_id))
    return SuccessResponse()


@router.get("/sessions/{session_id}", response_model=Session, response_model_by_alias=True)
def get_session(session_id: str, store: FeedbackStore = Depends(get_store)) -> Session:
    return call_store(lambda: store.get_session(session_id))
