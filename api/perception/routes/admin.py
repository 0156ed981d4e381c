import logging

from fastapi import APIRouter, Depends, Query

from .. import config
from ..deps import call_store, get_store, validate_admin_password
from ..schemas import AdminReportResponse
from ..services.aggregation import build_admin_report
from ..store import FeedbackStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin", response_model=AdminReportResponse, response_model_by_alias=True)
def admin_report(
    password: str | None = Query(default=None),
    store: FeedbackStore = Depends(get_store),
) -> AdminReportResponse:
    validate_admin_password(password, config.ADMIN_PASSWORD)
    out = call_store(lambda: build_admin_report(store))
    logger.info("[admin] report served total_responses=%s", out.report.total_responses)
    return out
