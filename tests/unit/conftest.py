"""
Global fixtures for all unit tests.

This conftest provides autouse fixtures that prevent real external service calls:
- MongoDB connection attempts (would cause 5-30s timeout per test)
- Environment variable isolation (prevents credential leakage)

These fixtures apply automatically to ALL tests in tests/unit/.
"""

import os
import pytest
from unittest.mock import patch, MagicMock

# Set test environment BEFORE any imports to prevent Config from loading real values.
# An empty GROQ_API_KEY keeps structured extraction off unless a test enables it.
os.environ["ENVIRONMENT"] = "development"
os.environ["MISTRAL_API_KEY"] = "test-mistral-key"
os.environ["GROQ_API_KEY"] = ""
os.environ["DEBUG_MODE"] = "false"


@pytest.fixture(autouse=True)
def mock_mongodb():
    """
    Prevent MongoDB connection attempts in all unit tests.

    MongoClient("") defaults to localhost:27017, causing 5-30s timeout per test.
    """
    with patch("src.common.repositories.mongo_profile_repository.MongoClient") as mock_client:
        mock_instance = MagicMock()
        mock_db = MagicMock()
        mock_collection = MagicMock()

        # Setup chain: client["db"]["collection"]
        mock_instance.__getitem__ = MagicMock(return_value=mock_db)
        mock_db.__getitem__ = MagicMock(return_value=mock_collection)
        mock_collection.count_documents = MagicMock(return_value=0)

        mock_client.return_value = mock_instance
        yield mock_client


@pytest.fixture(autouse=True)
def reset_repositories():
    """Drop repository singletons so every test sees a fresh client."""
    from src.common.repositories import reset_profile_repository
    from src.common.repositories.mongo_profile_repository import MongoProfileRepository

    reset_profile_repository()
    MongoProfileRepository.reset_connection()
    yield
    reset_profile_repository()
    MongoProfileRepository.reset_connection()


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Isolate test environment from real credentials and configurations.

    Config reads the environment once at import, so the class attributes
    are pinned here as well.
    """
    from src.common.config import Config

    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017")
    monkeypatch.setattr(Config, "GROQ_API_KEY", "")
    monkeypatch.setattr(Config, "MISTRAL_API_KEY", "test-mistral-key")
    monkeypatch.setattr(Config, "MISTRAL_BASE_URL", "https://api.mistral.test")
