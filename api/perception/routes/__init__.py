from fastapi import APIRouter, FastAPI

from .admin import router as admin_router
from .feedback import router as feedback_router


def include_routers(app: FastAPI) -> None:
    app.include_router(feedback_router, tags=["feedback"])
    app.include_router(admin_router, tags=["admin"])


__all__ = ["include_routers", "APIRouter"]
