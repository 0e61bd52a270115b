"""
Resume import: uploaded resume -> profile draft + reviewable section drafts.

Pipeline: Text Extractor (Mistral OCR) -> Profile Extractor (structured
model, heuristic fallback) -> Section Importers -> Import Staging Store.
"""

from src.resume_import.profile_extractor import ProfileExtractor
from src.resume_import.section_importers import SECTION_SPECS, build_section_items
from src.resume_import.service import ResumeImportService, import_profile_from_resume
from src.resume_import.staging import (
    CommitAllResult,
    DraftStatus,
    ImportSession,
    begin_edit,
    cancel_edit,
    clear_session,
    commit_all,
    commit_draft,
    initialize_session,
    remove_draft,
    update_draft,
    update_profile_draft,
)
from src.resume_import.text_extractor import TextExtractor
from src.resume_import.types import (
    ImportContextCounts,
    ImportSectionKey,
    ProfileFieldsDraft,
    ResumeImportResponse,
)

__all__ = [
    # Entry point
    "ResumeImportService",
    "import_profile_from_resume",
    # Stages
    "TextExtractor",
    "ProfileExtractor",
    "SECTION_SPECS",
    "build_section_items",
    # Staging
    "CommitAllResult",
    "DraftStatus",
    "ImportSession",
    "begin_edit",
    "cancel_edit",
    "clear_session",
    "commit_all",
    "commit_draft",
    "initialize_session",
    "remove_draft",
    "update_draft",
    "update_profile_draft",
    # Types
    "ImportContextCounts",
    "ImportSectionKey",
    "ProfileFieldsDraft",
    "ResumeImportResponse",
]
