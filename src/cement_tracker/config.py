"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="CT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Cement Delivery Tracker API"
    api_prefix: str = "/api"
    app_base_url: str = Field(
        default="http://localhost:5173",
        description="Public web origin used to build shareable tracking links.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    supabase_schema: str = Field(default="public", description="Postgres schema holding the tracking tables.")
    supabase_timeout_seconds: float = Field(default=10.0, gt=0.0)

    # Geocoding provider
    mapbox_token: Optional[str] = Field(default=None, description="Mapbox access token.")
    mapbox_base_url: str = Field(default="https://api.mapbox.com")
    geocoding_country: Optional[str] = Field(
        default="BR",
        description="Country hint for forward geocoding (ISO 3166 alpha-2).",
    )
    geocoding_language: Optional[str] = Field(default="pt")
    geocoding_timeout_seconds: float = Field(default=10.0, gt=0.0)
    reverse_geocode_max_parallel: int = Field(default=5, ge=1)

    # Delivery progress and tracking codes
    average_speed_kmh: float = Field(
        default=50.0,
        gt=0.0,
        description="Average road speed assumed when estimating arrival times.",
    )
    tracking_code_length: int = Field(default=10, ge=6, le=32)
    tracking_code_max_attempts: int = Field(default=5, ge=1)

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("app_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()
