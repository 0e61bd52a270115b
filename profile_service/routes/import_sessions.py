"""
Import Session API Routes.

Review surface for a staged resume import:
- Session: create from an import result, read, clear
- Drafts: begin/cancel edit, update, discard, commit
- Profile: replace the reviewed profile draft
- Commit all: persist every pending draft in section order

Storage calls are blocking (pymongo) and run in a worker thread. Each
handler holds the session's lock, so changes to one session never overlap
while requests for other sessions keep being served.
"""

import asyncio
import logging
from functools import partial
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from src.common.repositories import ProfileRepositoryInterface, get_profile_repository
from src.common.error_handling import StagingError
from src.resume_import.staging import (
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
from src.resume_import.types import ImportSectionKey, ResumeImportResponse

from ..auth import get_user_id, verify_token
from ..models import CommitAllResponse, CommitDraftResponse, ProfileDraftUpdate, SuccessResponse
from ..sessions import SessionEntry, SessionNotFoundError, SessionRegistry, get_session_registry

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/profile/import-sessions",
    tags=["import-sessions"],
    dependencies=[Depends(verify_token)],
)

ITEM_PATH = "/{session_id}/sections/{section}/items/{item_id}"


# =============================================================================
# Helper Functions
# =============================================================================


def get_repository() -> ProfileRepositoryInterface:
    """
    Raises:
        HTTPException: 503 if profile storage is not configured
    """
    try:
        return get_profile_repository()
    except ValueError as e:
        logger.error(f"Profile repository unavailable: {e}")
        raise HTTPException(status_code=503, detail="Profile storage is not configured")


def _load_entry(registry: SessionRegistry, session_id: str, user_id: str) -> SessionEntry:
    try:
        return registry.get_entry(session_id, user_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Import session not found")


def _staging_error(e: StagingError) -> HTTPException:
    return HTTPException(status_code=e.status, detail=str(e))


def _validation_error(e: ValidationError) -> HTTPException:
    errors = [
        {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
        for error in e.errors()
    ]
    return HTTPException(status_code=422, detail=errors)


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


# =============================================================================
# Session Endpoints
# =============================================================================


@router.post("", status_code=201, summary="Stage an import for review")
async def create_import_session(
    payload: ResumeImportResponse,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
    repo: ProfileRepositoryInterface = Depends(get_repository),
) -> Dict[str, Any]:
    """
    Build drafts for every section of an import result.

    Display order of the new drafts continues after the entities the user
    already has, so counts are read from storage first.
    """
    try:
        counts = await asyncio.to_thread(repo.context_counts, user_id)
    except Exception as e:
        logger.error(f"Failed to count profile entities for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Profile storage is unavailable")

    session = registry.create(user_id)
    initialize_session(session, payload, counts)
    return _dump(session)


@router.get("/{session_id}", summary="Get an import session")
async def get_import_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        return _dump(entry.session)


@router.delete("/{session_id}", response_model=SuccessResponse, summary="Discard an import session")
async def delete_import_session(
    session_id: str,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SuccessResponse:
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        clear_session(entry.session)
        try:
            registry.discard(session_id, user_id)
        except SessionNotFoundError:
            # Discarded by a request that held the lock before us
            pass
    return SuccessResponse(success=True, message="Import session discarded")


@router.put("/{session_id}/profile", summary="Replace the profile draft")
async def update_session_profile(
    session_id: str,
    update: ProfileDraftUpdate,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        profile = update_profile_draft(entry.session, update.profile, update.warnings)
        return _dump(profile)


@router.post("/{session_id}/commit-all", response_model=CommitAllResponse, summary="Commit every pending draft")
async def commit_all_drafts(
    session_id: str,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
    repo: ProfileRepositoryInterface = Depends(get_repository),
) -> CommitAllResponse:
    """
    Commit pending drafts one at a time in section order.

    A failed commit stops the batch; ``success`` is false and the failed
    draft plus everything after it remain staged.
    """
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        result = await asyncio.to_thread(commit_all, entry.session, partial(repo.create, user_id))

        if not result.success:
            logger.warning(
                f"Commit-all for session {session_id} stopped at "
                f"{result.failed_section}/{result.failed_item_id}: {result.error}"
            )

        return CommitAllResponse(**result.to_dict(), session=_dump(entry.session))


# =============================================================================
# Draft Endpoints
# =============================================================================


@router.post(ITEM_PATH + "/edit", summary="Start editing a draft")
async def start_draft_edit(
    session_id: str,
    section: ImportSectionKey,
    item_id: str,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        try:
            return _dump(begin_edit(entry.session, section, item_id))
        except StagingError as e:
            raise _staging_error(e)


@router.delete(ITEM_PATH + "/edit", summary="Cancel editing a draft")
async def cancel_draft_edit(
    session_id: str,
    section: ImportSectionKey,
    item_id: str,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        try:
            return _dump(cancel_edit(entry.session, section, item_id))
        except StagingError as e:
            raise _staging_error(e)


@router.put(ITEM_PATH, summary="Update a draft")
async def update_session_draft(
    session_id: str,
    section: ImportSectionKey,
    item_id: str,
    changes: Dict[str, Any] = Body(..., description="Create-request fields to change (camelCase)"),
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Dict[str, Any]:
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        try:
            return _dump(update_draft(entry.session, section, item_id, changes))
        except StagingError as e:
            raise _staging_error(e)
        except ValidationError as e:
            raise _validation_error(e)


@router.delete(ITEM_PATH, response_model=SuccessResponse, summary="Discard a draft")
async def discard_session_draft(
    session_id: str,
    section: ImportSectionKey,
    item_id: str,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
) -> SuccessResponse:
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        try:
            remove_draft(entry.session, section, item_id)
        except StagingError as e:
            raise _staging_error(e)
    return SuccessResponse(success=True, message="Draft discarded")


@router.post(ITEM_PATH + "/commit", response_model=CommitDraftResponse, summary="Commit a draft")
async def commit_session_draft(
    session_id: str,
    section: ImportSectionKey,
    item_id: str,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_session_registry),
    repo: ProfileRepositoryInterface = Depends(get_repository),
) -> CommitDraftResponse:
    entry = _load_entry(registry, session_id, user_id)
    async with entry.lock:
        try:
            record = await asyncio.to_thread(
                commit_draft, entry.session, section, item_id, partial(repo.create, user_id)
            )
        except StagingError as e:
            raise _staging_error(e)
        return CommitDraftResponse(record=record, remaining=entry.session.staged_count())
