"""
Repository Pattern for Profile Persistence

Public API:
- get_profile_repository(): Factory to get the profile repository instance
- ProfileRepositoryInterface: Abstract interface for profile sections

Usage:
    from src.common.repositories import get_profile_repository

    repo = get_profile_repository()
    counts = repo.context_counts(user_id)
    record = repo.create(user_id, "skills", {"name": "Python", "category": "technical"})
"""

from .base import ProfileRepositoryInterface, SECTION_COLLECTIONS
from .config import (
    get_profile_repository,
    reset_profile_repository,
    RepositoryConfig,
)

__all__ = [
    "get_profile_repository",
    "reset_profile_repository",
    "ProfileRepositoryInterface",
    "RepositoryConfig",
    "SECTION_COLLECTIONS",
]
