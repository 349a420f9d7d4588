"""
Модели данных, связанные с заявкой на обслуживание.

Заявка, событие истории и комментарий неизменяемы: любое изменение
создает новую копию записи через хранилище.
"""

import enum
from datetime import date, datetime, timezone

import pytz
from pydantic import BaseModel, ConfigDict, Field, field_validator

from facility_tracker.core.exceptions import ValidationError


class RequestStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.COMPLETED, RequestStatus.CANCELLED)


class RequestCategory(str, enum.Enum):
    ELECTRIC = "Electric"
    MACHINERY = "Machinery (AC)"
    REPAIR = "Repair/Maintenance"
    SECURITY = "Security (Gate)"
    MOVING = "Easy Stuff Moving"
    CLEANING = "Cleaning"
    FIRE_SYSTEM = "Fire System"
    OTHER = "Other"


class RequestLocation(str, enum.Enum):
    H3_OUTDOOR = "H-3 Outdoor"
    H4_OUTDOOR = "H-4 Outdoor"
    PAC = "PAC"
    SCHOOL_CENTER = "School Center"
    STMEV = "STMEV"
    MS_POD = "MS Pod"
    SS_POD = "SS Pod"
    UJS = "UJS"
    WELLNESS = "Wellness Center"
    SHIN_SAIMDANG = "Shin Saimdang"
    SHERBORN = "Sherborn"
    SEONDEOK = "Seondeok"
    OTHER = "Other"


class UrgencyLevel(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimelineEvent(BaseModel):
    """Запись об изменении статуса заявки."""

    model_config = ConfigDict(frozen=True)

    status: RequestStatus
    timestamp: datetime = Field(default_factory=utcnow)
    note: str | None = None


class Comment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    author_id: str
    author_name: str
    text: str
    timestamp: datetime = Field(default_factory=utcnow)


class ServiceRequest(BaseModel):
    """
    Модель заявки на техническое обслуживание.

    Инварианты: история статусов никогда не пуста, а `status` всегда
    совпадает со статусом последнего события истории.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""
    requester_id: str
    requester_name: str
    requester_email: str
    assignee_id: str | None = None
    assignee_name: str | None = None
    assignee_email: str | None = None
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: RequestCategory
    location: RequestLocation
    specific_location: str | None = None
    urgency: UrgencyLevel
    status: RequestStatus = RequestStatus.PENDING
    before_image_url: str | None = None
    after_image_url: str | None = None
    timeline: tuple[TimelineEvent, ...] = ()
    comments: tuple[Comment, ...] = ()
    hold_reason: str | None = None
    feedback_rating: int | None = Field(default=None, ge=1, le=5)
    feedback_comment: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    def completed_at(self) -> datetime | None:
        """Время первого перехода в статус Completed, если он был."""
        for event in self.timeline:
            if event.status is RequestStatus.COMPLETED:
                return event.timestamp
        return None


class RequestFilter(BaseModel):
    """
    Дополнительные фильтры списка заявок.

    Даты включительные; `end_date` покрывает весь день. Дата создания
    заявки вычисляется в часовом поясе `timezone`.
    """

    status: RequestStatus | None = None
    start_date: date | None = None
    end_date: date | None = None
    timezone: str = "UTC"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        # Ошибка ядра проходит через pydantic без обертки в его ValidationError
        try:
            pytz.timezone(value)
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValidationError(f"Unknown timezone: {value!r}.") from None
        return value
