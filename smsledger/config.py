"""
Application configuration using pydantic-settings.
All config is validated at startup - fail fast if anything is missing.
"""
from pydantic_settings import BaseSettings
from pydantic import Field, model_validator
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_uds: str = ""  # Unix socket path; takes precedence over host/port when set
    log_level: str = "INFO"

    # Twilio
    twilio_auth_token: str
    webhook_endpoint: str  # Public URL Twilio signs against

    # Message store
    message_store_db: str = "messages.db"

    # Request identity (Argon2id). Changing any of these changes every hash_id.
    # Bounds are Argon2's own minimums.
    identity_hash_salt: str = Field("smsledger-request-identity", min_length=8)
    identity_hash_time_cost: int = Field(3, ge=1)
    identity_hash_memory_cost: int = Field(65536, ge=8)  # KiB
    identity_hash_parallelism: int = Field(4, ge=1)
    identity_hash_length: int = Field(384, ge=4)

    # Sentry
    sentry_dsn: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @model_validator(mode="after")
    def _check_identity_hash_memory(self) -> "Settings":
        if self.identity_hash_memory_cost < 8 * self.identity_hash_parallelism:
            raise ValueError("identity_hash_memory_cost must be at least 8 * identity_hash_parallelism")
        return self

    @property
    def database_url(self) -> str:
        return f"sqlite+aiosqlite:///{self.message_store_db}"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
