"""
Resume Import API Route.

Accepts one uploaded resume (multipart field ``file``) and returns the
extracted profile draft, raw section arrays, the OCR markdown and warnings.

Status mapping:
- 400: no file, empty file, unreadable file
- 413: file larger than the upload limit
- 415: unsupported media type
- 502: OCR provider failure
- 500: anything unexpected
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from src.common.error_handling import (
    FileTooLargeError,
    ResumeImportError,
    ResumeInputError,
    UnsupportedMediaTypeError,
)
from src.resume_import.service import ResumeImportService
from src.resume_import.text_extractor import SUPPORTED_MEDIA_TYPES, normalize_media_type

from ..auth import get_user_id, verify_token
from ..config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["resume-import"])


def get_import_service() -> ResumeImportService:
    return ResumeImportService()


async def _read_upload(file: Optional[UploadFile]) -> tuple:
    """
    Validate the upload and read it, at most one byte past the limit.

    Returns:
        (content, normalized media type)

    Raises:
        ResumeImportError: 400, 413 or 415
    """
    if file is None:
        raise ResumeInputError("No file uploaded.")

    media_type = normalize_media_type(file.content_type)
    if media_type not in SUPPORTED_MEDIA_TYPES:
        raise UnsupportedMediaTypeError(
            "Unsupported file type. Upload a PDF, Word document or plain text file."
        )

    limit = settings.max_upload_bytes
    try:
        content = await file.read(limit + 1)
    except Exception as e:
        raise ResumeInputError("Uploaded file could not be read.", cause=e) from e

    if len(content) > limit:
        raise FileTooLargeError(
            f"Resume file is too large. The limit is {limit // (1024 * 1024)} MB."
        )
    if not content:
        raise ResumeInputError("Uploaded file is empty.")

    return content, media_type


@router.post(
    "/resume-import",
    dependencies=[Depends(verify_token)],
    summary="Import a resume",
    description="Extract profile fields and section data from an uploaded resume",
)
async def import_resume(
    file: Optional[UploadFile] = File(default=None),
    user_id: str = Depends(get_user_id),
    service: ResumeImportService = Depends(get_import_service),
) -> Dict[str, Any]:
    """
    Import one resume.

    The import itself is blocking (OCR and model calls over HTTP) and runs
    in a worker thread.

    Returns:
        ResumeImportResponse as camelCase JSON
    """
    try:
        content, media_type = await _read_upload(file)
        logger.info(f"Resume import for user {user_id}: {media_type}, {len(content)} bytes")
        result = await asyncio.to_thread(service.import_profile_from_resume, content, media_type)
    except ResumeImportError as e:
        logger.warning(f"Resume import rejected ({e.status}): {e.message}")
        raise HTTPException(status_code=e.status, detail=e.message)
    except Exception as e:
        logger.exception(f"Resume import failed unexpectedly: {e}")
        raise HTTPException(status_code=500, detail="Failed to import resume.")

    return result.model_dump(mode="json", by_alias=True)
