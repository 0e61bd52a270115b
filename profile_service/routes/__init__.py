"""
Profile service route modules.

Each module handles a specific area of functionality.
"""

from .resume_import import router as resume_import_router
from .import_sessions import router as import_sessions_router

__all__ = [
    "resume_import_router",
    "import_sessions_router",
]
