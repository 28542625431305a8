"""Common test fixtures."""

import pytest

from dashrecord.config import reset_config


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Load configuration from a clean environment for every test."""
    for var in ("DASHRECORD_LOG_LEVEL", "DASHRECORD_OPTION_POLICY", "DASHRECORD_REPR_MAX_STRING"):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()
