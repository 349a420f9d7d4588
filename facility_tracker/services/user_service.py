"""
Сервисный модуль для управления пользователями.

Хранит учетные записи в памяти, реализует саморегистрацию с одобрением
администратором и массовый импорт пользователей из CSV-текста.
"""

import logging
import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from facility_tracker.core.decorators import require_role
from facility_tracker.core.exceptions import NotFoundError, ValidationError
from facility_tracker.models.user import User, UserRole, avatar_url_for

logger = logging.getLogger(__name__)

# Поля, которые администратор может менять через update_user
EDITABLE_FIELDS = frozenset(
    {"name", "email", "role", "department", "contact_no", "is_approved"}
)


@dataclass
class ImportResult:
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)


def parse_role(value: str | None) -> UserRole:
    """Неизвестная или пустая роль трактуется как STAFF."""
    try:
        return UserRole((value or "").strip().upper())
    except ValueError:
        return UserRole.STAFF


class UserService:
    """
    Сервис для работы с данными пользователей.
    """

    def __init__(self, users: Iterable[User] = ()):
        self._users: dict[str, User] = {}
        for user in users:
            self._users[user.id] = user

    def _generate_user_code(self) -> str:
        taken = {u.user_code for u in self._users.values()}
        while True:
            code = f"USR-{random.randint(1000, 9999)}"
            if code not in taken:
                return code

    def _require(self, user_id: str) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found.")
        return user

    def get_all_users(self) -> list[User]:
        return list(self._users.values())

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        needle = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == needle:
                return user
        return None

    def add_user(self, user: User) -> User:
        """Добавляет готовую учетную запись (например, из демо-данных)."""
        if user.user_code is None:
            user = user.model_copy(update={"user_code": self._generate_user_code()})
        if user.avatar_url is None:
            user = user.model_copy(update={"avatar_url": avatar_url_for(user.name)})
        self._users[user.id] = user
        logger.info(f"User {user.id} ({user.email}) added with role {user.role.value}.")
        return user

    def register_user(
        self,
        name: str,
        email: str,
        role: UserRole = UserRole.STAFF,
        department: str | None = None,
        contact_no: str | None = None,
    ) -> User:
        """
        Саморегистрация. Новая учетная запись ждет одобрения администратора.

        Raises:
            ValidationError: Пустое имя или email уже зарегистрирован.
        """
        if not name or not name.strip():
            raise ValidationError("Full Name is required.")
        if self.get_user_by_email(email) is not None:
            raise ValidationError("This email is already registered.")

        try:
            user = User(
                name=name,
                email=email,
                role=role,
                department=department,
                contact_no=contact_no,
                is_approved=False,
            )
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid user: {e.errors()[0]['msg']}") from e

        logger.info(f"New user {user.email} registered, awaiting approval.")
        return self.add_user(user)

    @require_role(UserRole.ADMIN)
    def list_users(
        self,
        actor: User,
        pending_only: bool = False,
        search: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[User]:
        """Список пользователей для панели администратора с фильтрами."""
        users = self.get_all_users()
        if pending_only:
            users = [u for u in users if not u.is_approved]
        if search:
            needle = search.strip().lower()
            users = [
                u for u in users if needle in u.name.lower() or needle in u.email.lower()
            ]
        if start_date:
            users = [u for u in users if u.created_at.date() >= start_date]
        if end_date:
            users = [u for u in users if u.created_at.date() <= end_date]
        return users

    @require_role(UserRole.ADMIN)
    def approve_user(self, actor: User, user_id: str) -> User:
        user = self._require(user_id).model_copy(update={"is_approved": True})
        self._users[user_id] = user
        logger.info(f"Admin {actor.id} approved user {user_id}.")
        return user

    @require_role(UserRole.ADMIN)
    def update_user(self, actor: User, user_id: str, **changes: Any) -> User:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}.")

        current = self._require(user_id)
        if "email" in changes:
            other = self.get_user_by_email(changes["email"])
            if other is not None and other.id != user_id:
                raise ValidationError("This email is already registered.")

        try:
            user = User.model_validate({**current.model_dump(), **changes})
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid user: {e.errors()[0]['msg']}") from e

        self._users[user_id] = user
        logger.info(f"Admin {actor.id} updated user {user_id}: {sorted(changes)}.")
        return user

    @require_role(UserRole.ADMIN)
    def delete_users(self, actor: User, user_ids: Iterable[str]) -> int:
        deleted = 0
        for user_id in user_ids:
            if self._users.pop(user_id, None) is not None:
                deleted += 1
            else:
                logger.warning(f"User {user_id} not found for deletion.")
        logger.info(f"Admin {actor.id} deleted {deleted} user(s).")
        return deleted

    @require_role(UserRole.ADMIN)
    def bulk_import(self, actor: User, csv_text: str) -> ImportResult:
        """
        Массовый импорт пользователей. Формат строки: `Email, Name, Role`.

        Существующий email (без учета регистра) обновляет имя и роль,
        иначе создается новая одобренная учетная запись. Более поздняя
        строка с тем же email перезаписывает более раннюю.
        """
        result = ImportResult()
        for line_no, line in enumerate(csv_text.splitlines(), start=1):
            if not line.strip():
                continue
            parts = [part.strip() for part in line.split(",")]
            email = parts[0] if parts else ""
            name = parts[1] if len(parts) > 1 else ""
            if not email or not name:
                logger.warning(f"Skipping import line {line_no}: email and name required.")
                result.skipped.append(line_no)
                continue

            role = parse_role(parts[2] if len(parts) > 2 else None)
            existing = self.get_user_by_email(email)
            if existing is not None:
                self._users[existing.id] = existing.model_copy(
                    update={"name": name, "role": role, "is_approved": True}
                )
                result.updated.append(existing.id)
            else:
                try:
                    user = self.add_user(User(email=email, name=name, role=role))
                except PydanticValidationError:
                    logger.warning(f"Skipping import line {line_no}: invalid user data.")
                    result.skipped.append(line_no)
                    continue
                result.created.append(user.id)

        logger.info(
            f"Admin {actor.id} imported users: {len(result.created)} created, "
            f"{len(result.updated)} updated, {len(result.skipped)} skipped."
        )
        return result
