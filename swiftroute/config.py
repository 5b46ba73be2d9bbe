"""Application configuration via Pydantic Settings.

NOTE: We explicitly map common .env variable names (DATABASE_URL, OPENAI_API_KEY,
GOOGLE_API_KEY, etc.) to avoid silent misconfiguration.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage
    database_url: str = Field(default="", validation_alias="DATABASE_URL")
    storage_backend: Literal["postgres", "memory"] = Field(
        default="postgres", validation_alias="STORAGE_BACKEND"
    )
    db_connect_timeout_seconds: float = Field(default=5.0, validation_alias="DB_CONNECT_TIMEOUT_SECONDS")
    db_command_timeout_seconds: float = Field(default=10.0, validation_alias="DB_COMMAND_TIMEOUT_SECONDS")

    # Suggestion backend
    suggester_backend: Literal["openai", "gemini", "rules"] = Field(
        default="openai", validation_alias="SUGGESTER_BACKEND"
    )
    openai_api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_MODEL")
    google_api_key: str = Field(default="", validation_alias="GOOGLE_API_KEY")
    gemini_model: str = Field(default="gemini-1.5-flash", validation_alias="GEMINI_MODEL")
    llm_timeout_seconds: float = Field(default=20.0, validation_alias="LLM_TIMEOUT_SECONDS")

    # Dispatch
    dispatch_timezone: str = Field(default="UTC", validation_alias="DISPATCH_TIMEZONE")

    # App
    debug: bool = Field(default=False, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    csv_data_path: str = Field(default="data", validation_alias="CSV_DATA_PATH")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        validation_alias="CORS_ORIGINS",
    )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def missing_configuration(self) -> list[str]:
        """Names of required variables that are unset for the selected backends."""
        missing = []
        if self.storage_backend == "postgres" and not self.database_url.strip():
            missing.append("DATABASE_URL")
        if self.suggester_backend == "openai" and not self.openai_api_key.strip():
            missing.append("OPENAI_API_KEY")
        if self.suggester_backend == "gemini" and not self.google_api_key.strip():
            missing.append("GOOGLE_API_KEY")
        return missing


settings = Settings()
