"""Tests for settings precedence across params, environment, and YAML."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from packages.recourse.config import RecourseSettings, RetrySettings, load_settings


def _write_yaml(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_sources(clean_env: None, tmp_path: Path) -> None:
    """Model defaults apply when no source sets a value."""
    settings = load_settings(config_path=tmp_path / "missing.yaml")

    assert settings.environment == "production"
    assert settings.is_development is False
    assert settings.retry == RetrySettings()
    assert settings.logging.service == "recourse"


def test_yaml_file_is_loaded(clean_env: None, tmp_path: Path) -> None:
    """Values from the YAML file override model defaults."""
    path = _write_yaml(
        tmp_path / "recourse.yaml",
        "environment: development\nretry:\n  max_attempts: 5\n  jitter: true\n",
    )

    settings = load_settings(config_path=path)

    assert settings.is_development is True
    assert settings.retry.max_attempts == 5
    assert settings.retry.jitter is True
    assert settings.retry.base_delay_ms == 1000


def test_environment_overrides_yaml(
    clean_env: None, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Nested environment variables beat the YAML file."""
    path = _write_yaml(tmp_path / "recourse.yaml", "retry:\n  max_attempts: 5\n")
    monkeypatch.setenv("RECOURSE_RETRY__MAX_ATTEMPTS", "8")
    monkeypatch.setenv("RECOURSE_LOGGING__LEVEL", "DEBUG")

    settings = load_settings(config_path=path)

    assert settings.retry.max_attempts == 8
    assert settings.logging.level == "DEBUG"


def test_explicit_params_override_environment(
    clean_env: None, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Explicit params have the highest precedence."""
    monkeypatch.setenv("RECOURSE_ENVIRONMENT", "production")

    settings = load_settings(
        cli_params={"environment": "development"},
        config_path=tmp_path / "missing.yaml",
    )

    assert settings.environment == "development"


def test_invalid_environment_is_rejected(clean_env: None, tmp_path: Path) -> None:
    """Unknown build environments fail validation."""
    with pytest.raises(ValidationError):
        load_settings(
            cli_params={"environment": "staging"},
            config_path=tmp_path / "missing.yaml",
        )


@pytest.mark.parametrize(
    "values",
    [
        {"max_attempts": -1},
        {"base_delay_ms": -1},
        {"base_delay_ms": 5000, "max_delay_ms": 1000},
    ],
)
def test_retry_settings_reject_invalid_values(values: dict[str, int]) -> None:
    """Negative budgets and inverted delay bounds fail validation."""
    with pytest.raises(ValidationError):
        RetrySettings(**values)


def test_config_path_binding_leaves_base_settings_untouched(
    clean_env: None, tmp_path: Path
) -> None:
    """Binding a YAML path per call must not change the default location."""
    default_location = RecourseSettings.model_config["yaml_file"]

    load_settings(config_path=_write_yaml(tmp_path / "r.yaml", "environment: development\n"))

    assert RecourseSettings.model_config["yaml_file"] == default_location
