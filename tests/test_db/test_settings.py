"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from excel_data.settings import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.interaction_timeout_seconds == 30.0
    assert settings.interaction_backoff_multiplier == 2.0


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("EXCEL_DATA_INTERACTION_TIMEOUT_SECONDS", "5")
    monkeypatch.setenv("EXCEL_DATA_INTERACTION_BACKOFF_MAX_SECONDS", "0.5")

    settings = Settings(_env_file=None)

    assert settings.interaction_timeout_seconds == 5.0
    assert settings.interaction_backoff_max_seconds == 0.5


def test_backoff_bounds_are_checked():
    with pytest.raises(ValidationError):
        Settings(
            _env_file=None,
            interaction_backoff_initial_seconds=2.0,
            interaction_backoff_max_seconds=1.0,
        )


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, interaction_timeout_seconds=0)
