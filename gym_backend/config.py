"""
Configuration and settings for the gym admin backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Firebase Authentication (Identity Toolkit REST API)
    firebase_api_key: Optional[str] = Field(default=None)

    # Firebase Admin service account, either as discrete values or a key file
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_private_key: Optional[str] = Field(default=None)
    firebase_client_email: Optional[str] = Field(default=None)
    firebase_credentials_file: str = Field(default="serviceAccountKey.json")

    # HTTP
    frontend_url: str = Field(default="http://localhost:3000")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)

    # Runtime mode; stack traces are only returned in "development"
    app_env: str = Field(default="production")
    log_level: str = Field(default="INFO")

    # Session cookie
    session_cookie_name: str = Field(default="session")
    session_cookie_secure: bool = Field(default=False)
    session_expires_in_days: int = Field(default=5, ge=1, le=14)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @field_validator("firebase_private_key", mode="before")
    @classmethod
    def expand_newlines(cls, value: Optional[str]) -> Optional[str]:
        """Keys pasted into .env files carry literal "\\n" sequences."""
        if isinstance(value, str):
            return value.replace("\\n", "\n")
        return value

    @property
    def include_stack_traces(self) -> bool:
        return self.app_env.lower() == "development"

    @property
    def has_discrete_credentials(self) -> bool:
        return bool(
            self.firebase_project_id
            and self.firebase_private_key
            and self.firebase_client_email
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
