# app/core/config.py
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TASKTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "TaskTrack"
    log_level: str = "INFO"

    # --- Store ---
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "tasktrack"

    # --- Notifiche ---
    # vuoto = niente RabbitMQ, le notifiche finiscono solo nei log
    rabbitmq_url: str = ""
    notifications_exchange: str = "tasktrack.notifications"
    notifications_routing_key: str = "assignments.reminders"
    notifications_enabled: bool = False
    reminder_window_hours: int = 24

    # IANA name, vuoto = timezone locale dell'host
    timezone: str = ""

    # --- Auth (token emessi dal provider esterno) ---
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_audience: Optional[str] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
