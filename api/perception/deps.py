import hmac
import logging
from typing import Callable, TypeVar

from fastapi import HTTPException, Request

from .errors import SessionNotFound, SessionValidationError, StorageFault
from .store import FeedbackStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_store(request: Request) -> FeedbackStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Feedback store not initialised")
    return store


def call_store(op: Callable[[], T]) -> T:
    try:
        return op()
    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except SessionValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except StorageFault:
        logger.exception("[store] storage fault")
        raise HTTPException(status_code=500, detail="Feedback storage unavailable")


def validate_admin_password(password: str | None, admin_password: str | None) -> None:
    if not admin_password or not password:
        raise HTTPException(status_code=401, detail="Invalid admin password")
    if not hmac.compare_digest(password.encode("utf-8"), admin_password.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Invalid admin password")
