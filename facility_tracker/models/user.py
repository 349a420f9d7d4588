"""
Модели данных, связанные с пользователем.
"""

import enum
import uuid
from datetime import datetime, timezone
from urllib.parse import quote_plus

from pydantic import BaseModel, Field, field_validator


class UserRole(str, enum.Enum):
    STAFF = "STAFF"
    WORKER = "WORKER"
    ADMIN = "ADMIN"


def avatar_url_for(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote_plus(name)}&background=random"


class User(BaseModel):
    """
    Модель пользователя. Для ядра заявок это действующее лицо (actor).

    Атрибуты:
        id (str): Уникальный идентификатор пользователя.
        user_code (str | None): Короткий код вида USR-1234.
        name (str): Полное имя.
        email (str): Адрес электронной почты.
        role (UserRole): Роль пользователя в системе.
        is_approved (bool): Одобрена ли учетная запись администратором.
    """

    id: str = Field(default_factory=lambda: f"u-{uuid.uuid4().hex[:12]}")
    user_code: str | None = None
    name: str = Field(..., min_length=1, description="User's full name")
    email: str = Field(..., min_length=3, description="User's email")
    role: UserRole = UserRole.STAFF
    department: str | None = None
    contact_no: str | None = None
    avatar_url: str | None = None
    is_approved: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("name", "email")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()
