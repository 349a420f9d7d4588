"""
Модуль для конфигурации логирования.

Все логгеры пакета пишут в stdout в едином формате; уровень берется из
настроек (LOG_LEVEL), если не передан явно.
"""

import logging
import sys

from facility_tracker.core.config import settings

PACKAGE_LOGGER = "facility_tracker"
LOG_FORMAT = "%(asctime)s - [%(levelname)s] - %(name)s - (%(filename)s).%(funcName)s(%(lineno)d) - %(message)s"

# Сторонние библиотеки, которые логируют каждый HTTP-запрос и повтор
NOISY_LOGGERS = ("urllib3", "tenacity")


def resolve_level(level: int | str | None) -> int:
    """
    Приводит уровень логирования к числу.

    Raises:
        ValueError: Неизвестное имя уровня.
    """
    if level is None:
        level = settings.log_level
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(level: int | str | None = None) -> logging.Logger:
    """
    Настраивает вывод логов пакета в stdout и возвращает логгер пакета.

    Args:
        level: Уровень логирования числом или именем; по умолчанию из настроек.
    """
    numeric_level = resolve_level(level)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=numeric_level, handlers=[stdout_handler])

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return package_logger
