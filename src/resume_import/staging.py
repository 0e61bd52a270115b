"""
Import staging: the reviewable state between an import and the profile.

An ImportSession holds the profile draft and the seven lists of staged
drafts of one import. The module-level functions are the only way to change
a session; each takes the session explicitly and mutates it in place.

Draft lifecycle:
    pending -> editing -> pending      (edit cycle, nothing persisted)
    pending -> saving -> committed     (persisted, removed from the session)
    saving -> pending                  (persisting failed, stays staged)
    pending|editing -> discarded       (removed, never persisted)

Committing is the only transfer from a session to storage, and a committed
draft is removed from the session in the same step.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import Field

from src.common.error_handling import DraftCommitError, DraftNotFoundError, DraftStateError
from src.resume_import.normalizers import dedupe_warnings
from src.resume_import.section_importers import SECTION_SPECS
from src.resume_import.types import (
    CamelModel,
    CreateRequest,
    ImportContextCounts,
    ImportSectionKey,
    ProfileExtraction,
    ProfileFieldsDraft,
    SectionDraftItem,
)

logger = logging.getLogger(__name__)

# (section key, camelCase payload) -> stored record
EntityCreator = Callable[[str, Dict[str, Any]], Dict[str, Any]]

MSG_NOTHING_TO_SAVE = "No pending items to save."
MSG_SAVE_FAILED = "Failed to save imported data. Please try again."


class DraftStatus(str, Enum):
    PENDING = "pending"
    EDITING = "editing"
    SAVING = "saving"
    COMMITTED = "committed"
    DISCARDED = "discarded"


class StagedDraft(SectionDraftItem):
    status: DraftStatus = DraftStatus.PENDING


def _empty_sections() -> Dict[ImportSectionKey, List[StagedDraft]]:
    return {key: [] for key in ImportSectionKey}


class ImportSession(CamelModel):
    """Everything staged by one import, awaiting review."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    profile: ProfileFieldsDraft = Field(default_factory=ProfileFieldsDraft)
    profile_warnings: List[str] = Field(default_factory=list)
    sections: Dict[ImportSectionKey, List[StagedDraft]] = Field(default_factory=_empty_sections)
    warnings: List[str] = Field(default_factory=list)
    context_counts: ImportContextCounts = Field(default_factory=ImportContextCounts)
    last_imported_at: Optional[datetime] = None

    def items(self, section: ImportSectionKey) -> List[StagedDraft]:
        return self.sections.setdefault(ImportSectionKey(section), [])

    def find(self, section: ImportSectionKey, item_id: str) -> StagedDraft:
        for draft in self.items(section):
            if draft.id == item_id:
                return draft
        raise DraftNotFoundError(f"No staged {ImportSectionKey(section).value} draft with id {item_id}")

    def staged_count(self) -> int:
        return sum(len(drafts) for drafts in self.sections.values())

    def is_empty(self) -> bool:
        return self.staged_count() == 0 and self.last_imported_at is None


@dataclass
class CommitAllResult:
    """Outcome of committing every pending draft of a session."""

    success: bool
    committed: Dict[str, int] = field(default_factory=dict)
    summary: List[str] = field(default_factory=list)
    message: str = ""
    warnings: List[str] = field(default_factory=list)
    error: Optional[str] = None
    failed_section: Optional[str] = None
    failed_item_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for JSON serialization."""
        return {
            "success": self.success,
            "committed": self.committed,
            "summary": self.summary,
            "message": self.message,
            "warnings": self.warnings,
            "error": self.error,
            "failed_section": self.failed_section,
            "failed_item_id": self.failed_item_id,
        }


def _require_status(draft: StagedDraft, allowed: tuple, action: str) -> None:
    if draft.status not in allowed:
        raise DraftStateError(
            f"Cannot {action} draft {draft.id} while it is {DraftStatus(draft.status).value}"
        )


# ===== SESSION OPERATIONS =====

def initialize_session(
    session: ImportSession,
    payload: ProfileExtraction,
    counts: Union[ImportContextCounts, Mapping[str, int], None] = None,
) -> ImportSession:
    """
    Replace the session contents with a fresh import.

    Every section builder runs with the persisted count of its section, so
    drafts continue the existing display order. Global warnings are the
    import warnings followed by every section's warnings, de-duplicated.
    """
    if not isinstance(counts, ImportContextCounts):
        counts = ImportContextCounts.model_validate(counts or {})

    sections: Dict[ImportSectionKey, List[StagedDraft]] = {}
    section_warnings: List[str] = []

    for key, spec in SECTION_SPECS.items():
        result = spec.builder(payload.section_items(key), counts.for_section(key))
        sections[key] = [
            StagedDraft(id=item.id, request=item.request, warnings=list(item.warnings))
            for item in result.items
        ]
        section_warnings.extend(result.warnings)

    session.profile = payload.profile.model_copy()
    session.profile_warnings = list(payload.warnings)
    session.sections = sections
    session.warnings = dedupe_warnings([*payload.warnings, *section_warnings])
    session.context_counts = counts
    session.last_imported_at = datetime.now(timezone.utc)

    logger.info(
        f"Staged import {session.id}: {session.staged_count()} drafts, "
        f"{len(session.warnings)} warnings"
    )
    return session


def update_profile_draft(
    session: ImportSession,
    profile: Union[ProfileFieldsDraft, Mapping[str, Any]],
    warnings: Optional[List[str]] = None,
) -> ProfileFieldsDraft:
    """
    Replace the profile draft after review.

    Raises:
        pydantic.ValidationError: Invalid email or URL
    """
    if not isinstance(profile, ProfileFieldsDraft):
        profile = ProfileFieldsDraft.model_validate(dict(profile))
    session.profile = profile
    session.profile_warnings = list(warnings or [])
    return profile


def begin_edit(session: ImportSession, section: ImportSectionKey, item_id: str) -> StagedDraft:
    draft = session.find(section, item_id)
    _require_status(draft, (DraftStatus.PENDING, DraftStatus.EDITING), "edit")
    draft.status = DraftStatus.EDITING
    return draft


def cancel_edit(session: ImportSession, section: ImportSectionKey, item_id: str) -> StagedDraft:
    draft = session.find(section, item_id)
    _require_status(draft, (DraftStatus.PENDING, DraftStatus.EDITING), "cancel editing")
    draft.status = DraftStatus.PENDING
    return draft


def _validated_request(
    section: ImportSectionKey,
    current: CreateRequest,
    patch: Union[CreateRequest, Mapping[str, Any]],
) -> CreateRequest:
    model = SECTION_SPECS[ImportSectionKey(section)].request_model
    if isinstance(patch, CreateRequest):
        patch = patch.model_dump(exclude_unset=True)

    by_alias = {info.alias: name for name, info in model.model_fields.items() if info.alias}
    changes = {by_alias.get(key, key): value for key, value in dict(patch).items()}

    return model.model_validate({**current.model_dump(), **changes})


def update_draft(
    session: ImportSession,
    section: ImportSectionKey,
    item_id: str,
    request: Union[CreateRequest, Mapping[str, Any]],
) -> StagedDraft:
    """
    Replace a draft's request after an edit and return it to pending.

    Fields missing from ``request`` keep their current values. The draft's
    own warnings are cleared since the user has reviewed it.

    Raises:
        DraftStateError: Draft is being saved
        pydantic.ValidationError: Patched request is not valid for the section
    """
    draft = session.find(section, item_id)
    _require_status(draft, (DraftStatus.PENDING, DraftStatus.EDITING), "update")

    draft.request = _validated_request(section, draft.request, request)
    draft.warnings = []
    draft.status = DraftStatus.PENDING
    return draft


def remove_draft(session: ImportSession, section: ImportSectionKey, item_id: str) -> StagedDraft:
    """Discard a draft; it is never persisted."""
    draft = session.find(section, item_id)
    _require_status(draft, (DraftStatus.PENDING, DraftStatus.EDITING), "discard")

    session.items(section).remove(draft)
    draft.status = DraftStatus.DISCARDED
    return draft


def commit_draft(
    session: ImportSession,
    section: ImportSectionKey,
    item_id: str,
    create: EntityCreator,
) -> Dict[str, Any]:
    """
    Persist one pending draft and remove it from the session.

    On failure the draft returns to pending so it can be retried.

    Returns:
        The stored record returned by ``create``

    Raises:
        DraftStateError: Draft is not pending (being edited or already saving)
        DraftCommitError: ``create`` failed
    """
    section = ImportSectionKey(section)
    draft = session.find(section, item_id)
    _require_status(draft, (DraftStatus.PENDING,), "commit")

    draft.status = DraftStatus.SAVING
    try:
        record = create(section.value, draft.request.model_dump(by_alias=True))
    except Exception as e:
        draft.status = DraftStatus.PENDING
        logger.warning(f"Committing {section.value} draft {item_id} failed: {e}")
        raise DraftCommitError(
            f"Failed to save {SECTION_SPECS[section].singular} draft: {e}"
        ) from e

    session.items(section).remove(draft)
    draft.status = DraftStatus.COMMITTED
    return record


def commit_all(session: ImportSession, create: EntityCreator) -> CommitAllResult:
    """
    Commit every pending draft, section by section, one at a time.

    The first failure stops the batch: drafts committed before it stay
    committed, the failed draft and everything after it stay staged. A batch
    that leaves nothing staged clears the session.
    """
    queue = [
        (key, draft.id)
        for key in SECTION_SPECS
        for draft in session.items(key)
        if draft.status == DraftStatus.PENDING
    ]
    warnings = list(session.warnings)

    if not queue:
        return CommitAllResult(success=True, message=MSG_NOTHING_TO_SAVE, warnings=warnings)

    committed: Dict[str, int] = {}
    for key, item_id in queue:
        try:
            commit_draft(session, key, item_id, create)
        except DraftCommitError as e:
            summary = _summarize(committed)
            return CommitAllResult(
                success=False,
                committed=committed,
                summary=summary,
                message=MSG_SAVE_FAILED,
                warnings=warnings,
                error=str(e),
                failed_section=key.value,
                failed_item_id=item_id,
            )
        committed[key.value] = committed.get(key.value, 0) + 1

    summary = _summarize(committed)
    if session.staged_count() == 0:
        clear_session(session)

    return CommitAllResult(
        success=True,
        committed=committed,
        summary=summary,
        message=f"Saved {', '.join(summary)}.",
        warnings=warnings,
    )


def _summarize(committed: Dict[str, int]) -> List[str]:
    return [
        spec.describe(committed[key.value])
        for key, spec in SECTION_SPECS.items()
        if committed.get(key.value)
    ]


def clear_session(session: ImportSession) -> ImportSession:
    """Discard everything staged, unconditionally."""
    for drafts in session.sections.values():
        for draft in drafts:
            draft.status = DraftStatus.DISCARDED
    session.profile = ProfileFieldsDraft()
    session.profile_warnings = []
    session.sections = _empty_sections()
    session.warnings = []
    session.context_counts = ImportContextCounts()
    session.last_imported_at = None
    return session
