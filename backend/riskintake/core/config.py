from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Forms shipped with the package (riskintake/forms/)
_PACKAGED_FORMS_DIR = Path(__file__).resolve().parent.parent / "forms"


class Settings(BaseSettings):
    """Centralized, type-validated configuration for the risk intake backend."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_to_file: bool = True

    # Risk level thresholds on the normalized score (0-100)
    risk_medium_threshold: float = Field(default=40.0, ge=0, le=100)
    risk_high_threshold: float = Field(default=70.0, ge=0, le=100)
    section_alert_percentage: float = Field(default=80.0, ge=0, le=100)

    # Form storage
    forms_dir: Path = Field(default=_PACKAGED_FORMS_DIR)
    default_form_id: str = Field(default="tracs_rif", min_length=1)

    # Parsed form cache
    cache_ttl_seconds: int = Field(default=300, ge=10, le=86400)
    cache_max_size: int = Field(default=100, ge=1, le=10000)

    @model_validator(mode="after")
    def validate_thresholds(self) -> "Settings":
        if self.risk_medium_threshold > self.risk_high_threshold:
            raise ValueError("risk_medium_threshold must not exceed risk_high_threshold")
        return self

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Cached singleton so .env is read once per process."""
    return Settings()


settings = get_settings()
