"""Configuration loading with deterministic precedence.

The cascade is always:
1) Explicit params
2) Environment variables
3) ~/.config/recourse/recourse.yaml (or an explicit ``config_path``)
4) Built-in model defaults

Environment variable format:
- Prefix: ``RECOURSE_``
- Nested keys: ``__`` separator
- Example: ``RECOURSE_RETRY__MAX_ATTEMPTS=5`` -> ``retry.max_attempts = 5``
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic_settings import SettingsConfigDict

from .models import RecourseSettings


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> RecourseSettings:
    """Load settings by applying the standard precedence cascade."""
    settings_cls = RecourseSettings
    if config_path is not None:
        settings_cls = _with_yaml_file(Path(config_path))
    return settings_cls(**dict(cli_params or {}))


def _with_yaml_file(path: Path) -> type[RecourseSettings]:
    """Return a settings subclass bound to one YAML file location."""
    return type(RecourseSettings)(
        "RecourseSettings",
        (RecourseSettings,),
        {
            "__module__": RecourseSettings.__module__,
            "model_config": SettingsConfigDict(yaml_file=path),
        },
    )
