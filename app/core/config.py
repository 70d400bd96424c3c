from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuración de la aplicación"""

    # Configuración de la base de datos
    database_url: str = "sqlite:///./tasks.db"
    sql_echo: bool = False
    auto_create_db: bool = True

    # Configuración de la aplicación
    app_name: str = "Task Tracker API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000"]

    # Configuración JWT (un secreto por tipo de token)
    access_token_secret: str = "change-this-access-secret-in-production"
    refresh_token_secret: str = "change-this-refresh-secret-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 8
    refresh_token_expire_days: int = 7
    refresh_cookie_name: str = "refresh_token"

    # Recuperación de contraseña
    password_reset_code_expire_minutes: int = 15

    # Configuración de email
    email_backend: str = "disabled"
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_from: Optional[str] = None
    smtp_from_email: Optional[str] = None
    smtp_from_name: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @property
    def refresh_cookie_path(self) -> str:
        return f"{self.api_prefix}/auth"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Instancia única de configuración, construida una sola vez al arrancar"""
    return Settings()


settings = get_settings()
