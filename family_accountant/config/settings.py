"""
Configuration Management for Family Accountant

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SupabaseSettings(BaseSettings):
    """Supabase (hosted Postgres) storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: str = Field(
        ...,
        description="Supabase project URL"
    )
    key: str = Field(
        ...,
        description="Supabase API key (anon or service role)"
    )
    audit_table: str = Field(
        default="ai_audit_log",
        description="Table that receives appended audit events"
    )

    @field_validator('url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Supabase URLs are always https."""
        if not v.startswith("https://") and not v.startswith("http://localhost"):
            raise ValueError(f"Supabase URL must use https: {v}")
        return v.rstrip("/")


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )
    max_tool_rounds: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Maximum function-calling rounds per question"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    default_financial_year: str = Field(
        default="2024-25",
        pattern=r"^\d{4}-\d{2}$",
        description="Financial year used when a calculation does not name one"
    )
    cap_warning_percent: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Contribution cap usage that triggers an 'approaching' warning"
    )
    eofy_warning_days: int = Field(
        default=60,
        ge=0,
        description="Days before 30 June when trust distribution warnings start"
    )
    rates_file: Optional[str] = Field(
        default=None,
        description="Optional JSON file overriding the built-in tax rates table"
    )

    @field_validator('rates_file')
    @classmethod
    def validate_rates_file(cls, v: Optional[str]) -> Optional[str]:
        """Fail early if an override file is configured but missing."""
        if v and not Path(v).exists():
            raise ValueError(f"Rates file not found: {v}")
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so the calculators work
    # without any external service configured.

    @property
    def supabase(self) -> SupabaseSettings:
        return SupabaseSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus
    {setting_name}_error entries for the ones that failed.
    """
    results: dict[str, object] = {}
    settings = get_settings()

    for name in ("supabase", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
