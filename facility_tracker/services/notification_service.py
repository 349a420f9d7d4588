"""
Сервис для формирования и отправки уведомлений об изменениях заявок.
"""

import logging
from datetime import datetime
from typing import Callable

import pytz

from facility_tracker.core.config import settings
from facility_tracker.models.request import ServiceRequest, TimelineEvent

logger = logging.getLogger(__name__)

NotificationSink = Callable[[str], None]


def _format_datetime(dt: datetime | None, tz_name: str | None = None) -> str:
    """
    Форматирует datetime объект в строку с учетом часового пояса из настроек.
    """
    if not dt:
        return "not set"

    # Убеждаемся, что время в UTC, если оно "наивное"
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=pytz.utc)

    display_tz = pytz.timezone(tz_name or settings.display_timezone)
    local_dt = dt.astimezone(display_tz)

    return local_dt.strftime("%Y-%m-%d %H:%M")


def _log_sink(message: str) -> None:
    logger.info(message)


class NotificationService:
    """
    Формирует текст уведомлений и передает его в канал доставки (sink).

    Ошибки доставки логируются и не прерывают операцию над заявкой.
    """

    def __init__(
        self, sink: NotificationSink | None = None, timezone: str | None = None
    ) -> None:
        self.sink = sink or _log_sink
        self.timezone = timezone

    def _deliver(self, request_id: str, text: str) -> None:
        try:
            self.sink(text)
        except Exception as e:
            logger.error(
                f"Failed to send notification for {request_id}: {e}", exc_info=True
            )

    def send_new_request_notification(self, request: ServiceRequest) -> None:
        """Уведомление о новой заявке для исполнителей."""
        location = request.location.value
        if request.specific_location:
            location = f"{location} ({request.specific_location})"
        text = (
            f"New request #{request.id}: {request.title}\n"
            f"Location: {location}\n"
            f"Category: {request.category.value}\n"
            f"Urgency: {request.urgency.value}\n"
            f"Requester: {request.requester_name}\n"
            f"Created: {_format_datetime(request.created_at, self.timezone)}"
        )
        self._deliver(request.id, text)

    def send_status_notification(
        self, request: ServiceRequest, event: TimelineEvent
    ) -> None:
        """Уведомление автора заявки о смене статуса."""
        text = (
            f"Request #{request.id} ({request.title}) is now {event.status.value}\n"
            f"Changed: {_format_datetime(event.timestamp, self.timezone)}"
        )
        if request.assignee_name:
            text += f"\nAssignee: {request.assignee_name}"
        if event.note:
            text += f"\nNote: {event.note}"
        self._deliver(request.id, text)
