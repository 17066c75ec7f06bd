"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any import that might build settings,
so the module-level app in ``todo_api.main`` uses an in-memory database.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from todo_api.core.app_factory import create_app
from todo_api.core.config import AppSettings, DatabaseSettings, LogSettings, Settings


def build_settings(**app_overrides) -> Settings:
    """Settings for an isolated app backed by a fresh in-memory database."""
    return Settings(
        app=AppSettings(**app_overrides),
        database=DatabaseSettings(url="sqlite://"),
        log=LogSettings(level="WARNING"),
    )


@pytest.fixture
def make_client():
    """Factory building a TestClient for an app with custom AppSettings."""

    def _make(**app_overrides) -> TestClient:
        return TestClient(create_app(build_settings(**app_overrides)))

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    """Client with throttling disabled, for CRUD tests."""
    return make_client(rate_limit_enabled=False)
