"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from dramacast.config import Settings


def test_release_interval_defaults_to_a_minute() -> None:
    assert Settings().release_interval_seconds == 60.0


@pytest.mark.parametrize("interval", [0.5, 61, 3600])
def test_release_interval_bounds(interval) -> None:
    """Ticks run at least once a minute, since release times are minute-level."""
    with pytest.raises(ValidationError):
        Settings(release_interval_seconds=interval)


def test_release_interval_from_env(monkeypatch) -> None:
    monkeypatch.setenv("RELEASE_INTERVAL_SECONDS", "30")

    assert Settings().release_interval_seconds == 30.0
