"""
Основная точка входа в приложение.

Собирает сервисы ядра и, при запуске как скрипт, выводит статистику
по демонстрационным данным.
"""

import logging
from dataclasses import dataclass

from facility_tracker.core.config import settings
from facility_tracker.core.logging_config import setup_logging
from facility_tracker.seed import seed
from facility_tracker.services.classifier import GeminiClassifier
from facility_tracker.services.notification_service import NotificationService
from facility_tracker.services.request_service import RequestService
from facility_tracker.services.request_store import RequestStore
from facility_tracker.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: RequestStore
    requests: RequestService
    users: UserService


def build_services(with_classifier: bool | None = None) -> Services:
    """
    Создает независимый набор сервисов с собственным хранилищем.

    Args:
        with_classifier: Подключать ли Gemini; по умолчанию, если задан ключ API.
    """
    if with_classifier is None:
        with_classifier = settings.classifier_enabled

    store = RequestStore()
    classifier = GeminiClassifier() if with_classifier else None
    request_service = RequestService(
        store=store,
        classifier=classifier,
        notifier=NotificationService(timezone=settings.display_timezone),
    )
    return Services(store=store, requests=request_service, users=UserService())


def main() -> None:
    """Основная функция для запуска демонстрации."""
    setup_logging()

    logger.info("Initializing services...")
    services = build_services()
    seed(services.store, services.users)

    stats = services.requests.compute_stats()
    logger.info(
        f"Loaded {stats.total} requests: {stats.pending_count} pending, "
        f"{stats.completed_count} completed, "
        f"average completion {stats.avg_completion_hours} h."
    )
    for item in stats.category_breakdown:
        logger.info(f"  {item.name}: {item.count}")


if __name__ == "__main__":
    main()
