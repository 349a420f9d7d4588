"""
Агрегированная статистика по набору заявок для панели администратора.
"""

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timezone

from facility_tracker.models.request import RequestStatus, ServiceRequest
from facility_tracker.models.stats import CategoryCount, Stats

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def _round_half_up(value: float, digits: int = 1) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def compute_stats(
    requests: Sequence[ServiceRequest], now: datetime | None = None
) -> Stats:
    """
    Считает количество заявок, среднее время выполнения и разбивку по категориям.

    Среднее время выполнения (в часах, с одним знаком после запятой) берется
    от создания заявки до первого события Completed. Если у выполненной
    заявки такого события нет, вместо него подставляется `now`.

    Args:
        requests: Заявки, по которым строится статистика.
        now: Текущее время для запасного варианта (по умолчанию UTC now).
    """
    pending_count = 0
    completed_durations: list[float] = []
    categories: dict[str, int] = {}

    for request in requests:
        if request.status is RequestStatus.PENDING:
            pending_count += 1
        elif request.status is RequestStatus.COMPLETED:
            end = request.completed_at()
            if end is None:
                logger.warning(
                    f"Completed request {request.id} has no Completed timeline event."
                )
                end = now or datetime.now(timezone.utc)
            completed_durations.append((end - request.created_at).total_seconds())

        # dict сохраняет порядок первого появления категории
        name = request.category.value
        categories[name] = categories.get(name, 0) + 1

    avg_hours = 0.0
    if completed_durations:
        avg_seconds = sum(completed_durations) / len(completed_durations)
        avg_hours = _round_half_up(avg_seconds / SECONDS_PER_HOUR)

    return Stats(
        total=len(requests),
        pending_count=pending_count,
        completed_count=len(completed_durations),
        avg_completion_hours=avg_hours,
        category_breakdown=[
            CategoryCount(name=name, count=count) for name, count in categories.items()
        ],
    )
