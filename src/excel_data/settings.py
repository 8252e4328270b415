"""Runtime settings for excel_data (Pydantic v2)."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from EXCEL_DATA_* env vars (and a local .env)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EXCEL_DATA_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    # ---- Host interaction-mode acquisition --------------------------------
    interaction_timeout_seconds: float = Field(30.0, gt=0)
    interaction_backoff_initial_seconds: float = Field(0.01, gt=0)
    interaction_backoff_max_seconds: float = Field(1.0, gt=0)
    interaction_backoff_multiplier: float = Field(2.0, ge=1)

    @model_validator(mode="after")
    def _check_backoff_bounds(self) -> Settings:
        if self.interaction_backoff_initial_seconds > self.interaction_backoff_max_seconds:
            raise ValueError(
                "interaction_backoff_initial_seconds must not exceed interaction_backoff_max_seconds"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
