"""
MongoDB Profile Repository

Stores each profile section in its own collection of one database.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo import MongoClient
from pymongo.database import Database

from .base import ProfileRepositoryInterface, collection_for

logger = logging.getLogger(__name__)


class MongoProfileRepository(ProfileRepositoryInterface):
    """
    MongoDB-backed profile repository.

    Connection Management:
    - Uses singleton MongoClient for connection pooling
    - Client is created once and reused across requests

    Error Handling:
    - Fail-fast: All errors propagate to caller
    """

    _client: Optional[MongoClient] = None
    _db: Optional[Database] = None

    def __init__(self, mongodb_uri: str, database: str = "profiles"):
        """
        Args:
            mongodb_uri: MongoDB connection string
            database: Database name (default: "profiles")
        """
        self._mongodb_uri = mongodb_uri
        self._database_name = database

    def _get_db(self) -> Database:
        if MongoProfileRepository._db is None:
            MongoProfileRepository._client = MongoClient(self._mongodb_uri)
            MongoProfileRepository._db = MongoProfileRepository._client[self._database_name]
            logger.info(f"Profile repository connected: {self._database_name}")
        return MongoProfileRepository._db

    def create(self, user_id: str, section: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        collection = self._get_db()[collection_for(section)]
        now = datetime.now(timezone.utc)

        document = dict(payload)
        document["userId"] = user_id
        document["createdAt"] = now
        document["updatedAt"] = now

        result = collection.insert_one(document)
        document.pop("_id", None)
        document["id"] = str(result.inserted_id)
        logger.debug(f"Created {section} record {document['id']} for user {user_id}")
        return document

    def count(self, user_id: str, section: str) -> int:
        collection = self._get_db()[collection_for(section)]
        return collection.count_documents({"userId": user_id})

    @classmethod
    def reset_connection(cls) -> None:
        """
        Reset the connection pool.

        Used for testing or connection recovery.
        """
        if cls._client:
            cls._client.close()
        cls._client = None
        cls._db = None
        logger.info("Profile repository connection reset")
