"""
In-memory registry of import sessions.

A session belongs to the user that created it; lookups by any other user
behave as if the session did not exist. Sessions untouched for longer than
the configured TTL are purged on the next registry access.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from src.resume_import.staging import ImportSession

from .config import settings

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionEntry:
    """In-memory tracking state for a session."""

    owner_id: str
    session: ImportSession
    touched_at: datetime = field(default_factory=_utcnow)
    # Held by every handler that reads or mutates the session
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionRegistry:
    def __init__(self, ttl_minutes: int):
        self.ttl = timedelta(minutes=ttl_minutes)
        self._entries: Dict[str, SessionEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def create(self, owner_id: str) -> ImportSession:
        self.purge_expired()
        session = ImportSession()
        self._entries[session.id] = SessionEntry(owner_id=owner_id, session=session)
        return session

    def get_entry(self, session_id: str, owner_id: str) -> SessionEntry:
        """
        Raises:
            SessionNotFoundError: Unknown, expired or owned by another user
        """
        self.purge_expired()
        entry = self._entries.get(session_id)
        if entry is None or entry.owner_id != owner_id:
            raise SessionNotFoundError(session_id)
        entry.touched_at = _utcnow()
        return entry

    def get(self, session_id: str, owner_id: str) -> ImportSession:
        return self.get_entry(session_id, owner_id).session

    def discard(self, session_id: str, owner_id: str) -> ImportSession:
        session = self.get(session_id, owner_id)
        del self._entries[session_id]
        return session

    def purge_expired(self, now: Optional[datetime] = None) -> List[str]:
        now = now or _utcnow()
        expired = [
            session_id
            for session_id, entry in self._entries.items()
            if now - entry.touched_at > self.ttl
        ]
        for session_id in expired:
            del self._entries[session_id]
        if expired:
            logger.info(f"Purged {len(expired)} expired import sessions")
        return expired

    def clear(self) -> None:
        self._entries.clear()


_registry: Optional[SessionRegistry] = None


def get_session_registry() -> SessionRegistry:
    global _registry
    if _registry is None:
        _registry = SessionRegistry(settings.session_ttl_minutes)
    return _registry
