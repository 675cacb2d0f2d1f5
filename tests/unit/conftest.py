"""
Global fixtures for all unit tests.

This conftest provides autouse fixtures that prevent real external service calls:
- MongoDB connection attempts (would cause 5-30s timeout per test)
- Environment variable isolation (prevents a developer's .env leaking in)

These fixtures apply automatically to ALL tests in tests/unit/.
"""

import pytest
from unittest.mock import patch, MagicMock

from mongrep.config import reset_client


@pytest.fixture(autouse=True)
def mock_mongodb():
    """
    Prevent MongoDB connection attempts in all unit tests.

    MongoClient("") defaults to localhost:27017, causing 5-30s timeout per test.
    """
    with patch("mongrep.config.MongoClient") as mock_client:
        mock_instance = MagicMock()
        mock_db = MagicMock()

        # Setup chain: client["db"]["collection"]
        mock_instance.__getitem__ = MagicMock(return_value=mock_db)
        mock_client.return_value = mock_instance
        yield mock_client
    reset_client()


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Isolate tests from real connection settings."""
    for name in ("MONGODB_URI", "MONGREP_DATABASE", "MONGREP_LOG_LEVEL", "MONGREP_LOG_FORMAT"):
        monkeypatch.delenv(name, raising=False)
