"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from app.core.config import AppSettings, LogSettings


def test_defaults_match_admission_policy(monkeypatch):
    for name in (
        "APP_RATE_LIMIT_REQUESTS",
        "APP_RATE_LIMIT_WINDOW_SECONDS",
        "APP_PORT",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = AppSettings()

    assert cfg.rate_limit_requests == 30
    assert cfg.rate_limit_window_seconds == 60
    assert cfg.rate_limit_evict_idle_keys is False
    assert cfg.trust_proxy_headers is True
    assert cfg.port == 8080


def test_port_read_from_plain_port_variable(monkeypatch):
    monkeypatch.delenv("APP_PORT", raising=False)
    monkeypatch.setenv("PORT", "9090")

    assert AppSettings().port == 9090


def test_prefixed_port_wins_over_plain_port(monkeypatch):
    monkeypatch.setenv("APP_PORT", "7000")
    monkeypatch.setenv("PORT", "9090")

    assert AppSettings().port == 7000


def test_rate_limit_values_are_validated(monkeypatch):
    monkeypatch.setenv("APP_RATE_LIMIT_REQUESTS", "0")

    with pytest.raises(ValidationError):
        AppSettings()


def test_log_settings_from_env(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "plain")
    monkeypatch.setenv("LOG_REQUEST_ID_HEADER", "X-Correlation-ID")

    cfg = LogSettings()

    assert cfg.format == "plain"
    assert cfg.request_id_header == "X-Correlation-ID"
