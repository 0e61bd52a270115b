"""
Shared Pydantic models for the profile service.

Session and import payloads reuse the models of ``src.resume_import``;
only service-specific envelopes live here.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from src.resume_import.types import CamelModel, ProfileFieldsDraft


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    ocr_configured: bool
    structured_extraction: bool
    active_sessions: int = 0


class ProfileDraftUpdate(CamelModel):
    """Reviewed profile draft sent back by the client."""

    profile: ProfileFieldsDraft
    warnings: List[str] = Field(default_factory=list)


class SuccessResponse(BaseModel):
    """Generic success response."""

    success: bool
    message: str = ""


class CommitDraftResponse(BaseModel):
    """A committed draft: the stored record plus what is still staged."""

    success: bool = True
    record: Dict[str, Any] = Field(default_factory=dict)
    remaining: int = 0


class CommitAllResponse(BaseModel):
    success: bool
    committed: Dict[str, int] = Field(default_factory=dict)
    summary: List[str] = Field(default_factory=list)
    message: str = ""
    warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    failed_section: Optional[str] = None
    failed_item_id: Optional[str] = None
    session: Dict[str, Any] = Field(default_factory=dict)
