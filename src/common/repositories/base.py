"""
Repository Interface Definitions

Defines the abstract interface for profile entity persistence.
The import pipeline only needs to create entities and count existing ones,
so the interface stays that narrow.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

# Section key -> collection name. Keys match ImportSectionKey values.
SECTION_COLLECTIONS: Dict[str, str] = {
    "work_experiences": "work_experiences",
    "education": "education",
    "skills": "skills",
    "projects": "projects",
    "certifications": "certifications",
    "achievements": "achievements",
    "references": "references",
}


class ProfileRepositoryInterface(ABC):
    """
    Abstract interface for profile section collections.

    Implementations:
    - MongoProfileRepository: MongoDB (Atlas or self-hosted)

    All methods are fail-fast: storage errors propagate to the caller.
    """

    @abstractmethod
    def create(self, user_id: str, section: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Persist one entity for a user.

        Args:
            user_id: Owner of the entity
            section: Section key (e.g. "work_experiences")
            payload: Validated create-request payload (camelCase keys)

        Returns:
            Stored record including its string "id"

        Raises:
            ValueError: If the section key is unknown
        """
        pass

    @abstractmethod
    def count(self, user_id: str, section: str) -> int:
        """Number of persisted entities of a section owned by the user."""
        pass

    def context_counts(self, user_id: str) -> Dict[str, int]:
        """
        Persisted entity count per section for a user.

        Used as the display-order baseline for a new import.
        """
        return {section: self.count(user_id, section) for section in SECTION_COLLECTIONS}


def collection_for(section: str) -> str:
    """Resolve a section key to its collection name."""
    try:
        return SECTION_COLLECTIONS[section]
    except KeyError:
        raise ValueError(f"Unknown profile section: {section}") from None
