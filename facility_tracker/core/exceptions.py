"""
Типы ошибок ядра.

Каждая ошибка несет человекочитаемую причину, которую слой интерфейса
показывает пользователю.
"""


class TrackerError(Exception):
    """Базовая ошибка трекера заявок."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotFoundError(TrackerError):
    """Операция ссылается на несуществующую заявку или пользователя."""


class ValidationError(TrackerError):
    """Недопустимый переход статуса, пустое обязательное поле и т.п."""


class AuthorizationError(TrackerError):
    """У пользователя нет роли или прав владельца для действия."""
