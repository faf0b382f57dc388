"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets the environment before settings are imported so no developer
.env file or Redis instance leaks into the test run.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

# Set default env vars that all tests might need
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from meeting_edge.adapters.kv.in_memory import InMemoryKeyValueStore
from meeting_edge.core.app_factory import create_app
from meeting_edge.core.config import AppSettings, LogSettings, Settings, StoreSettings

VALID_API_KEY = "test-api-key-123"


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build Settings with app-level overrides (e.g. rate_limit_requests=3)."""

    def _make(**app_overrides: Any) -> Settings:
        app_values: dict[str, Any] = {"api_keys": VALID_API_KEY}
        app_values.update(app_overrides)
        return Settings(
            app=AppSettings(**app_values),
            store=StoreSettings(backend="memory"),
            log=LogSettings(level="WARNING"),
        )

    return _make


@pytest.fixture
def make_client(make_settings, kv_store) -> Callable[..., TestClient]:
    """Build a TestClient around an app bound to the shared in-memory store."""

    def _make(store=None, **app_overrides: Any) -> TestClient:
        app = create_app(make_settings(**app_overrides), kv_store=store or kv_store)
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()
