"""
Pytest configuration for the calculation engine tests.

The environment variables are set at module level (not in pytest_configure)
because they need to be available before the app modules are imported
during pytest's collection phase.
"""

import os

# Set ENV=TEST to disable rate limiting BEFORE any modules are imported
os.environ["ENV"] = "TEST"
os.environ["DISABLE_RATE_LIMITS"] = "1"

import pytest


@pytest.fixture
def client():
    """Test client for the calculation API (stateless, no database)."""
    from fastapi.testclient import TestClient

    from valuecase.app.main import app

    return TestClient(app)
