"""
Repository Configuration and Factory

Provides the factory function returning the profile repository configured
from the environment.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from .base import ProfileRepositoryInterface

logger = logging.getLogger(__name__)


@dataclass
class RepositoryConfig:
    """
    Configuration for repository initialization.

    Loaded from environment variables with sensible defaults.
    """
    mongodb_uri: str
    database: str = "profiles"

    @classmethod
    def from_env(cls) -> "RepositoryConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - MONGODB_URI (required): MongoDB connection string
        - MONGO_DB_NAME: Database name (default: profiles)

        Raises:
            ValueError: If MONGODB_URI is not set
        """
        mongodb_uri = os.getenv("MONGODB_URI")
        if not mongodb_uri:
            raise ValueError("MONGODB_URI environment variable is required")

        return cls(
            mongodb_uri=mongodb_uri,
            database=os.getenv("MONGO_DB_NAME", "profiles"),
        )


# Singleton repository instance
_repository_instance: Optional[ProfileRepositoryInterface] = None


def get_profile_repository() -> ProfileRepositoryInterface:
    """
    Get the profile repository instance.

    Uses singleton pattern for connection pooling.

    Raises:
        ValueError: If MongoDB URI is not configured
    """
    global _repository_instance

    if _repository_instance is None:
        config = RepositoryConfig.from_env()

        from .mongo_profile_repository import MongoProfileRepository
        _repository_instance = MongoProfileRepository(
            mongodb_uri=config.mongodb_uri,
            database=config.database,
        )
        logger.info("Initialized MongoDB profile repository")

    return _repository_instance


def reset_profile_repository() -> None:
    """
    Reset the repository singleton.

    Used for testing or when configuration changes.
    """
    global _repository_instance

    if _repository_instance is not None:
        from .mongo_profile_repository import MongoProfileRepository
        if isinstance(_repository_instance, MongoProfileRepository):
            MongoProfileRepository.reset_connection()

    _repository_instance = None
    logger.info("Profile repository singleton reset")
