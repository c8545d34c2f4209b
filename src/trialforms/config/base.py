"""Base configuration settings."""

from typing import Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INTERACTION_TIMEOUT_MS = 300_000  # 5 minutes
DEFAULT_DEBOUNCE_MS = 300


class Settings(BaseSettings):
    """Process-wide settings.

    Only ambient concerns live here. Form behaviour is configured per form
    instance through ``FormConfig`` and never read from the environment.
    """

    model_config = SettingsConfigDict(
        env_prefix="TRIALFORMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "trialforms"
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "console"


class FormConfig(BaseModel):
    """Per-form configuration surface.

    Attributes:
        interaction_timeout_ms: How long a touch keeps the form "fresh"
        allow_empty_defaults: Field name -> allow_empty flag applied to optional rules
        debounce_ms: Delay used for validate-as-you-type debouncing
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    interaction_timeout_ms: int = Field(
        default=DEFAULT_INTERACTION_TIMEOUT_MS,
        gt=0,
        alias="interactionTimeoutMs",
    )
    allow_empty_defaults: Dict[str, bool] = Field(
        default_factory=dict, alias="allowEmptyDefaults"
    )
    debounce_ms: int = Field(default=DEFAULT_DEBOUNCE_MS, ge=0, alias="debounceMs")
