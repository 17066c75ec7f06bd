"""Tests for settings parsing helpers and validation."""

import pytest
from pydantic import ValidationError

from todo_api.core.config import AppSettings, split_csv


def test_split_csv_trims_and_drops_empty_items() -> None:
    assert split_csv(" /health, ,/metrics ") == ["/health", "/metrics"]
    assert split_csv("") == []
    assert split_csv(None) == []


def test_rate_limit_defaults() -> None:
    cfg = AppSettings()

    assert cfg.rate_limit_enabled is True
    assert cfg.rate_limit_requests == 100
    assert cfg.rate_limit_window_seconds == 3600


def test_rate_limit_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("APP_RATE_LIMIT_REQUESTS", "5")
    monkeypatch.setenv("APP_RATE_LIMIT_WINDOW_SECONDS", "30")

    cfg = AppSettings()

    assert cfg.rate_limit_requests == 5
    assert cfg.rate_limit_window_seconds == 30


@pytest.mark.parametrize("field", ["rate_limit_requests", "rate_limit_window_seconds"])
def test_rate_limit_rejects_non_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        AppSettings(**{field: 0})
