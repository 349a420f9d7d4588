"""
Модуль конфигурации проекта.

Загружает настройки из переменных окружения с помощью Pydantic Settings.
Все параметры имеют значения по умолчанию, поэтому ядро работает и без .env.
"""

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Основные настройки приложения.

    Атрибуты:
        gemini_api_key (str): Ключ Gemini API. Пустой ключ отключает автоклассификацию.
        gemini_model (str): Модель, используемая для классификации заявок.
        gemini_timeout_seconds (float): Таймаут одного HTTP-запроса к Gemini.
        display_timezone (str): Часовой пояс для отображения дат пользователям.
        log_level (str): Уровень логирования приложения.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # --- Gemini Settings ---
    gemini_api_key: str = Field(
        default="", alias="GEMINI_API_KEY", description="Google Gemini API key"
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash", description="Model used to classify requests"
    )
    gemini_timeout_seconds: float = Field(
        default=15.0, description="HTTP timeout for a single Gemini call"
    )

    # --- Business Logic Settings ---
    display_timezone: str = Field(
        default="Asia/Seoul",
        description="Timezone for displaying dates and times to users",
    )
    log_level: str = Field(default="INFO", description="Application log level")

    @computed_field
    @property
    def classifier_enabled(self) -> bool:
        """Классификация доступна только при заданном ключе API."""
        return bool(self.gemini_api_key.strip())


# Создаем единственный экземпляр настроек, который будет использоваться во всем приложении
settings = Settings()
