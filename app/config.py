"""Configuracion de la aplicacion usando Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuracion principal de Todo Reminders."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # App
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Timezone de referencia (horas civiles de los usuarios)
    tz: str = "Asia/Kathmandu"

    # Notion (document store)
    notion_api_key: str = ""
    notion_timeout_ms: int = 30_000
    notion_reminders_data_source_id: str = ""
    notion_todos_data_source_id: str = ""

    # SMTP
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    smtp_timeout: float = 30.0
    from_email: str = ""

    # Scheduler
    scheduler_enabled: bool = True
    reminder_dispatch_interval_minutes: int = 1

    # Alertas para operadores
    alert_email: str = ""

    @property
    def sender_address(self) -> str:
        """Remitente de los correos, por defecto el usuario SMTP."""
        return self.from_email or self.smtp_username

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuracion cacheada."""
    return Settings()
