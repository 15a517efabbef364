"""Pytest configuration and shared fixtures."""

import pytest
from hypothesis import settings

from steem_auth.config import reset_config

# Create a profile named "no_deadline" with deadline disabled.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")


@pytest.fixture(autouse=True)
def _restore_config():
    """Undo `set_config` calls made by a test."""
    yield
    reset_config()
