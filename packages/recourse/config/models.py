"""Typed configuration models for the recourse error engine."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "recourse" / "recourse.yaml"


class LoggingSettings(BaseModel):
    """Structured logging configuration for hosts embedding the engine."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "recourse"


class RetrySettings(BaseModel):
    """Default retry budget and backoff curve for retry controllers."""

    max_attempts: int = Field(default=3, ge=0)
    base_delay_ms: int = Field(default=1000, ge=0)
    max_delay_ms: int = Field(default=30000, ge=0)
    jitter: bool = False

    @model_validator(mode="after")
    def _cap_not_below_base(self) -> RetrySettings:
        """Reject a delay cap that is lower than the base delay."""
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("retry.max_delay_ms must be >= retry.base_delay_ms")
        return self


class RecourseSettings(BaseSettings):
    """Root settings resolved from init/env/yaml/defaults sources."""

    model_config = SettingsConfigDict(
        env_prefix="RECOURSE_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
        yaml_file=DEFAULT_CONFIG_PATH,
        yaml_file_encoding="utf-8",
    )

    environment: Literal["development", "production"] = "production"
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)

    @property
    def is_development(self) -> bool:
        """Return whether this is a development build."""
        return self.environment == "development"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Apply precedence: init > env > yaml > model defaults."""
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )
