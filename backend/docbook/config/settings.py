import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AnyHttpUrl, Field, model_validator
from typing import List

env = os.getenv("APP_ENV", "development")
env_file = f".env.{env}"


class Settings(BaseSettings):
    # Identity provider (Supabase Auth)
    supabase_url: AnyHttpUrl
    supabase_service_key: str
    provider_timeout_seconds: float = 10.0

    # CORS origins can be overridden via CORS_ORIGINS env var (JSON list)
    frontend_url: str = "http://localhost:5173"
    cors_origins: List[str] = Field(default_factory=list)

    # Session cookies
    session_max_age_days: int = 7

    port: int = 5000
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=env_file,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _default_cors_to_frontend(self):
        if not self.cors_origins:
            self.cors_origins = [self.frontend_url]
        return self

    @property
    def is_production(self) -> bool:
        return env == "production"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 86400

    @property
    def auth_base_url(self) -> str:
        return f"{str(self.supabase_url).rstrip('/')}/auth/v1"


settings = Settings()
