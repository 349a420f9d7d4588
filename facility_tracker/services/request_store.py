"""
Хранилище заявок в памяти.

Хранилище является явно передаваемым объектом: каждый сервис получает свой
экземпляр, поэтому независимые хранилища можно тестировать изолированно.
"""

import logging
import threading
import uuid
from typing import Any

from facility_tracker.models.request import ServiceRequest

logger = logging.getLogger(__name__)


class RequestStore:
    """
    Словарь "идентификатор -> заявка" с атомарной заменой записей.

    Идентификаторы не переиспользуются даже после удаления заявки.
    """

    def __init__(self, id_prefix: str = "req") -> None:
        self._id_prefix = id_prefix
        self._records: dict[str, ServiceRequest] = {}
        self._issued_ids: set[str] = set()
        # Сервис удерживает блокировку на время цикла "прочитать-проверить-записать"
        self.lock = threading.RLock()

    def _next_id(self) -> str:
        while True:
            candidate = f"{self._id_prefix}-{uuid.uuid4().hex[:8]}"
            if candidate not in self._issued_ids:
                self._issued_ids.add(candidate)
                return candidate

    def create(self, record: ServiceRequest) -> str:
        """Сохраняет новую заявку под свежим идентификатором и возвращает его."""
        with self.lock:
            request_id = self._next_id()
            self._records[request_id] = record.model_copy(update={"id": request_id})
        logger.debug(f"Stored request {request_id}.")
        return request_id

    def get(self, request_id: str) -> ServiceRequest | None:
        return self._records.get(request_id)

    def update(self, request_id: str, **changes: Any) -> ServiceRequest | None:
        """Заменяет заявку копией с изменениями. Возвращает None, если заявки нет."""
        changes.pop("id", None)
        with self.lock:
            current = self._records.get(request_id)
            if current is None:
                logger.warning(f"Request {request_id} not found for update.")
                return None
            updated = current.model_copy(update=changes)
            self._records[request_id] = updated
        return updated

    def delete(self, request_id: str) -> bool:
        with self.lock:
            if self._records.pop(request_id, None) is None:
                logger.warning(f"Request {request_id} not found for deletion.")
                return False
        logger.debug(f"Deleted request {request_id}.")
        return True

    def list(self) -> list[ServiceRequest]:
        with self.lock:
            return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._records
