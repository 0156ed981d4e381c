from __future__ import annotations

import math
import statistics
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Iterable

from ..config import CONFIDENCE_KEY
from ..schemas import AdminReportResponse, Report, Session
from ..store import FeedbackStore


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str) and value.strip():
            # Older form clients posted scale answers as strings.
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        # Ints past float range and unparsable text are not scores.
        return None
    return number if math.isfinite(number) else None


def _is_tag_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def _round2(value: float) -> float:
    with localcontext() as ctx:
        # Default precision (28 digits) cannot quantize values near float max.
        ctx.prec = 400
        return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def average_of(values: list[float]) -> float:
    if not values:
        return 0
    try:
        mean = statistics.fmean(values)
    except OverflowError:
        mean = math.inf
    if not math.isfinite(mean):
        # Values near float max overflow the plain sum; scale each one first.
        mean = math.fsum(v / len(values) for v in values)
    if not math.isfinite(mean):
        return 0
    return _round2(mean)


def summarize(sessions: Iterable[Session], *, confidence_key: str = CONFIDENCE_KEY) -> Report:
    """Aggregate a set of sessions into a Report.

    Callers choose the set; this does no filtering of its own.
    """
    total = 0
    confidence_scores: list[float] = []
    tag_frequency: dict[str, dict[str, int]] = {}

    for session in sessions:
        total += 1
        answers = session.answers

        score = _as_number(answers.get(confidence_key))
        if score is not None:
            confidence_scores.append(score)

        for key, value in answers.items():
            if not _is_tag_list(value):
                continue
            counts = tag_frequency.setdefault(key, {})
            for tag in dict.fromkeys(value):
                counts[tag] = counts.get(tag, 0) + 1

    return Report(
        total_responses=total,
        average_confidence=average_of(confidence_scores),
        tag_frequency=tag_frequency,
    )


def build_admin_report(store: FeedbackStore) -> AdminReportResponse:
    completed = store.list_completed()
    return AdminReportResponse(report=summarize(completed), responses=completed)
