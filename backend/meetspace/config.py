"""
MeetSpace Backend: Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types and ranges, and exposes a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at import time; `validate_required_for_production()` runs
       during application startup.
"""

from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults. Production deployments MUST set
    the Firebase credentials and the web API key.
    """

    # ── Firebase ──────────────────────────────────────────────────────────
    # Path to a service account JSON file. Empty means Application Default
    # Credentials (GOOGLE_APPLICATION_CREDENTIALS, GCE metadata, etc.).
    firebase_credentials_path: str = Field(default="")

    # Optional; inferred from the credentials when empty.
    firebase_project_id: str = Field(default="")

    # Web API key used for the password-grant (sign-in) REST call.
    # Not needed by the Admin SDK, only by POST /users/login.
    firebase_web_api_key: str = Field(default="")

    identity_toolkit_url: str = Field(
        default="https://identitytoolkit.googleapis.com/v1",
        description="Base URL of the Identity Toolkit REST API",
    )

    # Seconds; applied to the httpx client of the sign-in call
    identity_http_timeout: float = Field(default=10.0, gt=0, le=120)

    # ── Document Store ────────────────────────────────────────────────────
    # firestore: Cloud Firestore through the Firebase Admin SDK
    # memory:    in-process dictionaries (local development and tests)
    document_store: str = Field(default="firestore")

    users_collection: str = Field(default="users")
    meetings_collection: str = Field(default="meetings")

    # When False, any authenticated caller may read, update or delete a
    # meeting by id. When True, a non-owner gets 403.
    enforce_meeting_ownership: bool = Field(default=False)

    @field_validator("document_store")
    @classmethod
    def validate_document_store(cls, v: str) -> str:
        """Ensures the document store backend is one we can build."""
        valid = {"firestore", "memory"}
        lower = v.lower()
        if lower not in valid:
            raise ValueError(f"Invalid document_store '{v}'. Must be one of: {valid}")
        return lower

    # ── HTTP ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api/v1")

    # Comma-separated list of allowed browser origins
    cors_origins: str = Field(default="http://localhost:5173")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "BACKEND_PORT"),
    )

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that provider settings needed at runtime are present.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if not self.firebase_web_api_key:
            errors.append(
                "FIREBASE_WEB_API_KEY is not set. POST /users/login will answer 500. "
                "Find it under Project settings > General in the Firebase console."
            )
        if self.document_store == "memory":
            errors.append(
                "DOCUMENT_STORE=memory keeps documents in process memory; "
                "they are lost on restart."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
