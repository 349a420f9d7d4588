"""
Фильтр видимости заявок по роли пользователя.
"""

from collections.abc import Iterable
from datetime import datetime

import pytz

from facility_tracker.models.request import RequestFilter, ServiceRequest
from facility_tracker.models.user import User, UserRole


def _local_date(dt: datetime, tz_name: str):
    # "Наивное" время считаем UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=pytz.utc)
    return dt.astimezone(pytz.timezone(tz_name)).date()


def visible_requests(
    requests: Iterable[ServiceRequest],
    actor: User,
    filters: RequestFilter | None = None,
) -> list[ServiceRequest]:
    """
    Возвращает заявки, которые пользователь может видеть, новые первыми.

    Сотрудник (STAFF) видит только свои заявки, исполнитель и администратор
    видят все. Затем применяются фильтры по статусу и дате создания.
    """
    if actor.role is UserRole.STAFF:
        result = [r for r in requests if r.requester_id == actor.id]
    elif actor.role in (UserRole.WORKER, UserRole.ADMIN):
        result = list(requests)
    else:
        raise ValueError(f"Unknown role: {actor.role!r}")

    if filters is not None:
        if filters.status is not None:
            result = [r for r in result if r.status is filters.status]
        if filters.start_date is not None:
            result = [
                r
                for r in result
                if _local_date(r.created_at, filters.timezone) >= filters.start_date
            ]
        if filters.end_date is not None:
            result = [
                r
                for r in result
                if _local_date(r.created_at, filters.timezone) <= filters.end_date
            ]

    return sorted(result, key=lambda r: r.created_at, reverse=True)
