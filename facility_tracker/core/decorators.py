"""
Декораторы для проверки авторизации и прав доступа.
"""

import inspect
import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from facility_tracker.core.exceptions import AuthorizationError
from facility_tracker.models.user import User, UserRole

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def require_role(*roles: UserRole) -> Callable[[F], F]:
    """
    Декоратор для проверки, что действующий пользователь одобрен и имеет одну из ролей.

    Оборачиваемый метод обязан принимать аргумент `actor` (позиционно или по имени).
    Без указания ролей проверяется только одобрение учетной записи.

    Args:
        *roles: Роли, которым разрешен доступ.

    Returns:
        Декоратор для методов сервисов.

    Raises:
        AuthorizationError: Пользователь не одобрен или его роль не подходит.
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)
        if "actor" not in signature.parameters:
            raise TypeError(f"{func.__qualname__} must accept an 'actor' argument")

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            bound = signature.bind(*args, **kwargs)
            actor: User = bound.arguments["actor"]

            if not actor.is_approved:
                logger.warning(
                    f"Unapproved user {actor.id} ({actor.email}) tried to call "
                    f"{func.__name__}."
                )
                raise AuthorizationError("Administrator approval is pending.")

            if roles and actor.role not in roles:
                logger.warning(
                    f"Unauthorized access attempt by user {actor.id} ({actor.name}). "
                    f"User role: '{actor.role.value}'. Required roles: "
                    f"{[role.value for role in roles]}"
                )
                raise AuthorizationError(
                    f"Role '{actor.role.value}' is not allowed to {func.__name__.replace('_', ' ')}."
                )

            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
