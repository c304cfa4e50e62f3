"""Pytest configuration and fixtures."""
import os
import tempfile
import pytest

# Keep audit logs out of the working tree
os.environ.setdefault("PLAGSCORE_LOG_PATH", tempfile.mkdtemp(prefix="plagscore-logs-"))


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test."""
    from plagscore.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
