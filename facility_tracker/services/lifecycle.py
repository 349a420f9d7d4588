"""
Правила жизненного цикла заявки (конечный автомат статусов).

Модуль только проверяет переход и вычисляет изменения записи; сохранение
выполняет RequestService.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from facility_tracker.core.exceptions import AuthorizationError, ValidationError
from facility_tracker.models.request import (
    RequestStatus,
    ServiceRequest,
    TimelineEvent,
)
from facility_tracker.models.user import User, UserRole

CANCEL_NOTE = "Cancelled by requester"

_STAFF_ROLES = frozenset({UserRole.WORKER, UserRole.ADMIN})


@dataclass(frozen=True)
class TransitionRule:
    """
    Разрешенный переход между двумя статусами.

    Атрибуты:
        roles: Роли, которым разрешен переход (пусто, если решает владение).
        requester_only: Переход доступен только автору заявки.
        requires_note: Требуется непустой комментарий (причина).
        fixed_note: Комментарий, записываемый автоматически.
    """

    roles: frozenset[UserRole] = frozenset()
    requester_only: bool = False
    requires_note: bool = False
    fixed_note: str | None = None


TRANSITIONS: dict[tuple[RequestStatus, RequestStatus], TransitionRule] = {
    (RequestStatus.PENDING, RequestStatus.IN_PROGRESS): TransitionRule(roles=_STAFF_ROLES),
    (RequestStatus.IN_PROGRESS, RequestStatus.ON_HOLD): TransitionRule(
        roles=_STAFF_ROLES, requires_note=True
    ),
    (RequestStatus.ON_HOLD, RequestStatus.IN_PROGRESS): TransitionRule(roles=_STAFF_ROLES),
    (RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED): TransitionRule(roles=_STAFF_ROLES),
    (RequestStatus.PENDING, RequestStatus.CANCELLED): TransitionRule(
        requester_only=True, fixed_note=CANCEL_NOTE
    ),
}


def allowed_targets(status: RequestStatus) -> list[RequestStatus]:
    """Статусы, в которые заявку в принципе можно перевести из `status`."""
    return [target for (source, target) in TRANSITIONS if source is status]


def check_transition(
    request: ServiceRequest,
    new_status: RequestStatus,
    actor: User,
    note: str | None = None,
) -> TransitionRule:
    """
    Проверяет допустимость перехода и возвращает его правило.

    Raises:
        ValidationError: Недопустимая пара статусов или нет обязательной причины.
        AuthorizationError: Роль или владение не позволяют выполнить переход.
    """
    current = request.status
    if current.is_terminal:
        raise ValidationError(
            f"Request {request.id} is {current.value}; no further status changes are allowed."
        )

    rule = TRANSITIONS.get((current, new_status))
    if rule is None:
        raise ValidationError(
            f"Cannot change status from {current.value} to {new_status.value}."
        )

    if rule.requester_only and actor.id != request.requester_id:
        raise AuthorizationError(
            f"Only the requester can move request {request.id} to {new_status.value}."
        )
    if rule.roles and actor.role not in rule.roles:
        raise AuthorizationError(
            f"Role '{actor.role.value}' cannot move a request to {new_status.value}."
        )

    if rule.requires_note and not (note and note.strip()):
        raise ValidationError(
            f"A reason is required to put a request {new_status.value}."
        )
    return rule


def plan_transition(
    request: ServiceRequest,
    new_status: RequestStatus,
    actor: User,
    timestamp: datetime,
    note: str | None = None,
    after_image_url: str | None = None,
) -> dict[str, Any]:
    """
    Проверяет переход и вычисляет набор изменений для хранилища.

    Запись при этом не изменяется: при ошибке хранилище остается прежним.
    """
    rule = check_transition(request, new_status, actor, note)

    if rule.fixed_note is not None:
        note = rule.fixed_note
    elif note is not None and not note.strip():
        note = None

    # История упорядочена по времени, даже если часы сдвинулись назад
    last_timestamp = request.timeline[-1].timestamp if request.timeline else timestamp
    event = TimelineEvent(
        status=new_status, timestamp=max(timestamp, last_timestamp), note=note
    )

    changes: dict[str, Any] = {
        "status": new_status,
        "timeline": request.timeline + (event,),
    }

    if new_status is RequestStatus.IN_PROGRESS and request.assignee_id is None:
        changes.update(
            assignee_id=actor.id,
            assignee_name=actor.name,
            assignee_email=actor.email,
        )
    elif new_status is RequestStatus.ON_HOLD:
        changes["hold_reason"] = note
    elif new_status is RequestStatus.COMPLETED and after_image_url:
        changes["after_image_url"] = after_image_url

    return changes
