"""
Сервисный модуль для автоматической классификации заявок через Gemini API.

Классификация работает по принципу "best effort": любая ошибка приводит к
результату None, и заявка создается со значениями по умолчанию.
Реализует механизм повторных попыток (retry) для сетевых ошибок и ответов 5xx.
"""

import json
import logging
from typing import Protocol

import requests
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from facility_tracker.core.config import settings
from facility_tracker.models.request import (
    RequestCategory,
    RequestLocation,
    UrgencyLevel,
)

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = (
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
)

PROMPT_TEMPLATE = """Analyze the following facility maintenance or service request.
Description: "{description}"
Location: "{location}"

Determine the most appropriate Category from the list below and Urgency Level (Low, Medium, High).

Categories:
- Electric
- Machinery (AC) (for HVAC, facility systems)
- Repair/Maintenance (for architecture, building repairs)
- Security (Gate) (for access control, communication, gates)
- Easy Stuff Moving (for event support, furniture moving)
- Cleaning
- Fire System
- Other

The location will be one of: {locations}.

Also provide a very brief 5-word summary title."""

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "category": {
            "type": "STRING",
            "enum": [category.value for category in RequestCategory],
        },
        "urgency": {
            "type": "STRING",
            "enum": [urgency.value for urgency in UrgencyLevel],
        },
        "summary": {"type": "STRING"},
    },
    "required": ["category", "urgency", "summary"],
}


class Classification(BaseModel):
    """Предложение классификатора: категория, срочность и краткий заголовок."""

    category: RequestCategory
    urgency: UrgencyLevel
    summary: str


class RequestClassifier(Protocol):
    def classify(
        self, description: str, location: RequestLocation | str
    ) -> Classification | None: ...


def is_retryable_http_error(exception: BaseException) -> bool:
    return (
        isinstance(exception, requests.exceptions.HTTPError)
        and exception.response is not None
        and exception.response.status_code >= 500
    )


gemini_retry = retry(
    retry=(
        retry_if_exception_type(
            (requests.exceptions.ConnectionError, requests.exceptions.Timeout)
        )
        | retry_if_exception(is_retryable_http_error)
    ),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    stop=stop_after_attempt(3),
    before_sleep=before_sleep_log(logger, logging.WARNING),
)


class GeminiClassifier:
    """
    Классификатор заявок на основе Gemini (REST API generateContent).
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.gemini_model
        self.timeout = timeout or settings.gemini_timeout_seconds
        self.session = session or requests.Session()

    def _build_payload(self, description: str, location: str) -> dict:
        prompt = PROMPT_TEMPLATE.format(
            description=description,
            location=location,
            locations=", ".join(loc.value for loc in RequestLocation),
        )
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA,
            },
        }

    @gemini_retry
    def _generate(self, payload: dict) -> dict:
        response = self.session.post(
            GEMINI_ENDPOINT.format(model=self.model),
            params={"key": self.api_key},
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _extract_text(body: dict) -> str | None:
        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
        # Схема ответа требует JSON-строку; все остальное считаем некорректным ответом
        return text if isinstance(text, str) else None

    def classify(
        self, description: str, location: RequestLocation | str
    ) -> Classification | None:
        """
        Предлагает категорию, срочность и заголовок для описания заявки.

        Returns:
            Classification или None, если сервис недоступен или ответ некорректен.
        """
        if not self.api_key.strip():
            logger.warning("No API key provided for Gemini; skipping classification.")
            return None

        location_label = (
            location.value if isinstance(location, RequestLocation) else location
        )
        try:
            body = self._generate(self._build_payload(description, location_label))
        except (requests.exceptions.RequestException, RetryError) as e:
            logger.error(f"Gemini analysis failed: {e}", exc_info=True)
            return None

        text = self._extract_text(body)
        if not text:
            logger.warning("Gemini returned an empty response.")
            return None

        try:
            result = Classification.model_validate(json.loads(text))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error(f"Gemini returned malformed classification: {e}")
            return None

        logger.info(
            f"Gemini suggested category '{result.category.value}' "
            f"with urgency '{result.urgency.value}'."
        )
        return result
