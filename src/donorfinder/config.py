"""Application configuration and settings management."""

from pathlib import Path
from typing import Annotated, Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DONOR_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Donor Finder API"
    api_prefix: str = ""
    port: int = Field(default=5000, ge=1, le=65535)
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    geocoding_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL of the Nominatim-compatible geocoding service.",
    )
    geocoding_user_agent: str = Field(
        default="donor-finder/1.0",
        description="User agent sent to the geocoder (Nominatim rejects anonymous clients).",
    )
    geocoding_timeout_seconds: float = Field(default=10.0, gt=0.0)
    geocoding_health_postal_code: str = Field(
        default="560001",
        description="Postal code looked up by the geocoder health check.",
    )

    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("http://localhost:3000",),
        description="Permitted web origins for browser clients (CORS).",
    )

    qualification_threshold: float = Field(
        default=4.8,
        description="Donors must score strictly above this behaviour rating to be considered.",
    )
    earth_radius_km: float = Field(default=6371.0, gt=0.0)

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    repository_timeout_seconds: float = Field(default=10.0, gt=0.0)
    donor_table: str = "donor_datadump"
    output_table: str = "output_table"
    donor_file: Path = Field(
        default=Path("data/donors.csv"),
        description="Donor dump used when Supabase is not configured.",
    )

    @field_validator("donor_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

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

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


settings = Settings()
