"""Centralized application configuration using Pydantic Settings.

Loads configuration from environment variables and `.env` file with
full validation, type coercion, and sensible defaults.

Usage:
    from chat_proxy.config import get_settings

    settings = get_settings()  # cached singleton
    print(settings.WORKERS_AI_MODEL)
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_proxy.prompts.templates import DEFAULT_SYSTEM_PROMPT

DEFAULT_ASSETS_DIR = str(Path(__file__).resolve().parent.parent / "public")


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file.

    Required:
        CLOUDFLARE_ACCOUNT_ID: Account that owns the Workers AI binding.
        CLOUDFLARE_API_TOKEN: API token with Workers AI read permission.

    All other fields have sensible defaults and are optional overrides.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # silently ignore unknown env vars
    )

    # ── Flask ──────────────────────────────────────────────────────────
    FLASK_ENV: str = Field(default="development", description="Flask environment (development/production)")
    FLASK_DEBUG: bool = Field(default=False, description="Enable Flask debug mode")

    # ── Workers AI ────────────────────────────────────────────────────
    CLOUDFLARE_ACCOUNT_ID: str = Field(..., description="Cloudflare account ID (required)")
    CLOUDFLARE_API_TOKEN: str = Field(..., description="Cloudflare API token (required)")
    WORKERS_AI_BASE_URL: str = Field(
        default="https://api.cloudflare.com/client/v4",
        description="Cloudflare REST API base URL",
    )
    WORKERS_AI_MODEL: str = Field(
        default="@cf/meta/llama-4-scout-17b-16e-instruct",
        description="Workers AI model identifier",
    )
    MAX_TOKENS: int = Field(default=1024, ge=1, le=8192, description="Max tokens generated per reply")
    SYSTEM_PROMPT: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System prompt inserted when the caller sends none",
    )

    # ── AI Gateway (optional) ─────────────────────────────────────────
    AI_GATEWAY_ID: Optional[str] = Field(default=None, description="AI Gateway ID; unset calls Workers AI directly")
    AI_GATEWAY_BASE_URL: str = Field(
        default="https://gateway.ai.cloudflare.com/v1",
        description="AI Gateway base URL",
    )
    AI_GATEWAY_SKIP_CACHE: bool = Field(default=False, description="Bypass the gateway cache")
    AI_GATEWAY_CACHE_TTL: Optional[int] = Field(default=None, ge=0, description="Gateway cache TTL (seconds)")

    # ── HTTP Client ───────────────────────────────────────────────────
    HTTP_TIMEOUT: Optional[float] = Field(
        default=None, gt=0, description="Upstream timeout in seconds; unset waits indefinitely"
    )

    # ── Static assets ─────────────────────────────────────────────────
    ASSETS_DIR: str = Field(default=DEFAULT_ASSETS_DIR, description="Directory served for non-API paths")

    # ── Logging ───────────────────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    LOG_FORMAT: str = Field(default="json", description="Log output format ('json' for prod, 'console' for dev)")

    # ── Validators ────────────────────────────────────────────────────

    @field_validator("CLOUDFLARE_ACCOUNT_ID")
    @classmethod
    def validate_account_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("CLOUDFLARE_ACCOUNT_ID must be set")
        return v

    @field_validator("CLOUDFLARE_API_TOKEN")
    @classmethod
    def validate_api_token(cls, v: str) -> str:
        """Ensure the API token is not empty or a placeholder."""
        v = v.strip()
        if not v or v in ("your-api-token-here", "changeme"):
            raise ValueError(
                "CLOUDFLARE_API_TOKEN must be set to a valid API token. "
                "Create one at https://dash.cloudflare.com/profile/api-tokens"
            )
        return v

    @field_validator("SYSTEM_PROMPT")
    @classmethod
    def validate_system_prompt(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("SYSTEM_PROMPT cannot be blank")
        return v

    @field_validator("AI_GATEWAY_ID")
    @classmethod
    def validate_gateway_id(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank gateway ID as unset."""
        if v is None:
            return None
        return v.strip() or None

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate log level."""
        v = v.upper().strip()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        v = v.lower().strip()
        if v not in ("json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")
        return v

    @field_validator("WORKERS_AI_BASE_URL", "AI_GATEWAY_BASE_URL")
    @classmethod
    def validate_urls(cls, v: str) -> str:
        """Ensure base URLs don't have trailing slashes."""
        return v.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance.

    Uses `lru_cache` so the `.env` file is only read once.
    Call this everywhere instead of instantiating Settings directly.
    """
    return Settings()
