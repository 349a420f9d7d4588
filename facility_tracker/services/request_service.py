"""
Сервисный модуль для работы с заявками.

Объединяет хранилище, правила жизненного цикла, журнал комментариев,
фильтр видимости и статистику. Каждая операция возвращает актуальную
запись заявки после изменения.
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Callable

from pydantic import ValidationError as PydanticValidationError

from facility_tracker.core.decorators import require_role
from facility_tracker.core.exceptions import (
    NotFoundError,
    TrackerError,
    ValidationError,
)
from facility_tracker.models.request import (
    Comment,
    RequestCategory,
    RequestFilter,
    RequestLocation,
    RequestStatus,
    ServiceRequest,
    TimelineEvent,
    UrgencyLevel,
)
from facility_tracker.models.stats import Stats
from facility_tracker.models.user import User, UserRole
from facility_tracker.services import lifecycle, statistics
from facility_tracker.services.classifier import Classification, RequestClassifier
from facility_tracker.services.notification_service import NotificationService
from facility_tracker.services.request_store import RequestStore
from facility_tracker.services.visibility import visible_requests

logger = logging.getLogger(__name__)

TITLE_FALLBACK_LENGTH = 60


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_enum(enum_cls, value, field: str):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {field}: {value!r}.") from None


def _title_from_description(description: str) -> str:
    text = " ".join(description.split())
    if len(text) <= TITLE_FALLBACK_LENGTH:
        return text
    return text[: TITLE_FALLBACK_LENGTH - 3].rstrip() + "..."


class RequestService:
    """
    Сервис для работы с заявками на обслуживание.
    """

    def __init__(
        self,
        store: RequestStore,
        classifier: RequestClassifier | None = None,
        notifier: NotificationService | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.classifier = classifier
        self.notifier = notifier
        self.clock = clock

    # --- Создание и чтение ---

    def suggest(
        self, description: str, location: RequestLocation | str
    ) -> Classification | None:
        """Запрашивает подсказку классификатора; None, если он недоступен."""
        if self.classifier is None or not description.strip():
            return None
        try:
            return self.classifier.classify(description, location)
        except Exception as e:
            logger.error(f"Request classification failed: {e}", exc_info=True)
            return None

    @require_role()
    def create_request(
        self,
        actor: User,
        description: str,
        location: RequestLocation | str,
        title: str | None = None,
        category: RequestCategory | str | None = None,
        urgency: UrgencyLevel | str | None = None,
        specific_location: str | None = None,
        before_image_url: str | None = None,
    ) -> ServiceRequest:
        """
        Создает заявку от имени `actor` в статусе Pending.

        Поля, которые не указал пользователь (заголовок, категория, срочность),
        заполняются подсказкой классификатора, а если ее нет, значениями
        по умолчанию. Указанные пользователем значения всегда имеют приоритет.

        Raises:
            ValidationError: Пустое описание или заголовок, неизвестное значение перечисления.
        """
        location = _coerce_enum(RequestLocation, location, "location")
        category = _coerce_enum(RequestCategory, category, "category")
        urgency = _coerce_enum(UrgencyLevel, urgency, "urgency")

        if not description or not description.strip():
            raise ValidationError("Description is required.")

        if category is None or urgency is None or not (title and title.strip()):
            suggestion = self.suggest(description, location)
            if suggestion is not None:
                category = category or suggestion.category
                urgency = urgency or suggestion.urgency
                if not (title and title.strip()):
                    title = suggestion.summary

        category = category or RequestCategory.OTHER
        urgency = urgency or UrgencyLevel.MEDIUM
        if not (title and title.strip()):
            title = _title_from_description(description)

        now = self.clock()
        try:
            draft = ServiceRequest(
                requester_id=actor.id,
                requester_name=actor.name,
                requester_email=actor.email,
                title=title.strip(),
                description=description.strip(),
                category=category,
                location=location,
                specific_location=(specific_location or "").strip() or None,
                urgency=urgency,
                status=RequestStatus.PENDING,
                before_image_url=before_image_url or None,
                timeline=(TimelineEvent(status=RequestStatus.PENDING, timestamp=now),),
                created_at=now,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid request: {e.errors()[0]['msg']}") from e

        request_id = self.store.create(draft)
        request = self.store.get(request_id)
        logger.info(
            f"User {actor.id} created request {request_id} "
            f"({request.category.value}, {request.urgency.value})."
        )
        if self.notifier:
            self.notifier.send_new_request_notification(request)
        return request

    def get_request(self, request_id: str) -> ServiceRequest:
        request = self.store.get(request_id)
        if request is None:
            raise NotFoundError(f"Request {request_id} not found.")
        return request

    def list_visible(
        self, actor: User, filters: RequestFilter | None = None
    ) -> list[ServiceRequest]:
        """Заявки, доступные пользователю, отсортированные от новых к старым."""
        return visible_requests(self.store.list(), actor, filters)

    def compute_stats(self, requests: Sequence[ServiceRequest] | None = None) -> Stats:
        """Статистика по переданным заявкам (по умолчанию по всем заявкам хранилища)."""
        if requests is None:
            requests = self.store.list()
        return statistics.compute_stats(requests, now=self.clock())

    # --- Жизненный цикл ---

    @require_role()
    def transition_status(
        self,
        request_id: str,
        new_status: RequestStatus | str,
        actor: User,
        note: str | None = None,
        after_image_url: str | None = None,
    ) -> ServiceRequest:
        """
        Переводит заявку в новый статус и добавляет событие в историю.

        Raises:
            NotFoundError: Заявка не найдена.
            ValidationError: Переход недопустим или нет обязательной причины.
            AuthorizationError: Роль или владение не позволяют выполнить переход.
        """
        new_status = _coerce_enum(RequestStatus, new_status, "status")

        with self.store.lock:
            request = self.get_request(request_id)
            try:
                changes = lifecycle.plan_transition(
                    request,
                    new_status,
                    actor,
                    timestamp=self.clock(),
                    note=note,
                    after_image_url=after_image_url,
                )
            except TrackerError as e:
                logger.warning(
                    f"User {actor.id} failed to move request {request_id} "
                    f"from '{request.status.value}' to '{new_status.value}': {e.reason}"
                )
                raise
            updated = self.store.update(request_id, **changes)

        logger.info(
            f"Request {request_id} moved to '{new_status.value}' by user {actor.id}."
        )
        if self.notifier:
            self.notifier.send_status_notification(updated, updated.timeline[-1])
        return updated

    def cancel_request(self, request_id: str, actor: User) -> ServiceRequest:
        """Отмена заявки ее автором, пока она в статусе Pending."""
        return self.transition_status(request_id, RequestStatus.CANCELLED, actor)

    @require_role(UserRole.ADMIN)
    def delete_request(self, request_id: str, actor: User) -> None:
        if not self.store.delete(request_id):
            raise NotFoundError(f"Request {request_id} not found.")
        logger.info(f"Admin {actor.id} deleted request {request_id}.")

    # --- Комментарии ---

    @require_role()
    def add_comment(self, request_id: str, actor: User, text: str) -> Comment:
        """
        Добавляет комментарий в конец списка комментариев заявки.

        Raises:
            NotFoundError: Заявка не найдена.
            ValidationError: Текст пуст после удаления пробелов.
        """
        with self.store.lock:
            request = self.get_request(request_id)
            if not text or not text.strip():
                raise ValidationError("Comment text must not be empty.")

            comment = Comment(
                id=f"c-{uuid.uuid4().hex[:12]}",
                author_id=actor.id,
                author_name=actor.name,
                text=text.strip(),
                timestamp=self.clock(),
            )
            self.store.update(request_id, comments=request.comments + (comment,))

        logger.info(f"User {actor.id} commented on request {request_id}.")
        return comment
