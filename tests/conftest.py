"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins the environment before settings are imported and gives every test a
fresh admission controller.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_REQUESTS", "30")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_SECONDS", "60")

import pytest

from app.core.rate_limit import reset_rate_limiter


@pytest.fixture(autouse=True)
def _fresh_rate_limiter():
    """Start every test with an empty request log."""
    reset_rate_limiter()
    yield
    reset_rate_limiter()
