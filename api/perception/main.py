import logging

from fastapi import FastAPI

from .config import LOG_LEVEL
from .routes import include_routers
from .store import open_store

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Perception Feedback API")
include_routers(app)


@app.on_event("startup")
def on_startup() -> None:
    if getattr(app.state, "store", None) is not None:
        return
    store = open_store()
    # Fails startup on a corrupt collection.
    existing = store.list_sessions()
    logger.info("[startup] loaded %d feedback sessions", len(existing))
    app.state.store = store


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
