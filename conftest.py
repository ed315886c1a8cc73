"""
Shared pytest fixtures.
"""

import pytest

from shared.config import ServiceConfig


@pytest.fixture(autouse=True)
def ignore_env_file(monkeypatch):
    """Read configuration from the process environment only."""
    monkeypatch.setitem(ServiceConfig.model_config, "env_file", None)
