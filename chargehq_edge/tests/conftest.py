"""
Shared test fixtures for edge daemon tests.

Provides environment variable fixtures for EdgeSettings configuration tests.
All edge env vars are cleaned before each test to ensure isolation.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import pytest

# All EdgeSettings environment variable names, used for cleanup.
_ALL_EDGE_ENV_VARS = (
    "SOLAREDGE_HOST",
    "SOLAREDGE_PORT",
    "SOLAREDGE_SLAVE_ID",
    "CHARGEHQ_API_KEY",
    "POLL_INTERVAL_S",
    "MODBUS_TIMEOUT_S",
    "RETRY_BASE_DELAY_MS",
    "RETRY_MAX_ATTEMPTS",
    "METER_EXPORT_POSITIVE",
    "HEALTH_PATH",
)


@pytest.fixture(autouse=True)
def _clean_edge_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all edge env vars and isolate from .env files before each test.

    Changes working directory to tmp_path so no .env file is accidentally
    loaded by Pydantic BaseSettings.
    """
    for var in _ALL_EDGE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def env_vars_full(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set all required and optional environment variables for EdgeSettings.

    Returns the dict of env var names to values for assertion convenience.
    """
    env = {
        "SOLAREDGE_HOST": "192.168.1.50",
        "SOLAREDGE_PORT": "502",
        "SOLAREDGE_SLAVE_ID": "2",
        "CHARGEHQ_API_KEY": "test-api-key",
        "POLL_INTERVAL_S": "60",
        "MODBUS_TIMEOUT_S": "5.5",
        "RETRY_BASE_DELAY_MS": "100",
        "RETRY_MAX_ATTEMPTS": "3",
        "METER_EXPORT_POSITIVE": "false",
        "HEALTH_PATH": "/tmp/health.json",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env


@pytest.fixture()
def env_vars_required_only(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set only the required environment variables (no optional ones).

    Optional variables should fall back to their defaults.
    """
    env = {
        "SOLAREDGE_HOST": "10.0.0.20",
        "CHARGEHQ_API_KEY": "key-xyz",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env
