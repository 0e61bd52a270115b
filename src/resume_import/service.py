"""
Resume import entry point.

``import_profile_from_resume`` runs one import: text extraction, then
profile extraction over that text. Input and upstream errors abort the
import; everything else ends up as warnings next to whatever was extracted.
"""

import time
import uuid
from typing import Optional

from src.common.error_handling import ResumeImportError
from src.common.logger import get_logger
from src.common.structured_logger import StageContext, get_event_logger
from src.resume_import.profile_extractor import ProfileExtractor
from src.resume_import.text_extractor import TextExtractor, normalize_media_type
from src.resume_import.types import RawDocument, ResumeImportResponse


class ResumeImportService:
    """
    Orchestrates one resume import.

    Usage:
        service = ResumeImportService()
        response = service.import_profile_from_resume(content, "application/pdf")
    """

    def __init__(
        self,
        text_extractor: Optional[TextExtractor] = None,
        profile_extractor: Optional[ProfileExtractor] = None,
        emit_events: bool = True,
    ):
        self.text_extractor = text_extractor or TextExtractor()
        self.profile_extractor = profile_extractor or ProfileExtractor()
        self.emit_events = emit_events

    def import_profile_from_resume(self, content: bytes, media_type: Optional[str]) -> ResumeImportResponse:
        """
        Import a resume document.

        Size and non-emptiness of the upload are the caller's concern.

        Args:
            content: Raw document bytes
            media_type: Declared media type (parameters and case are ignored)

        Returns:
            ResumeImportResponse with profile draft, raw sections, markdown and warnings

        Raises:
            ResumeImportError: Input (400/415) or upstream (502) failure
        """
        import_id = uuid.uuid4().hex
        log = get_logger(__name__, import_id=import_id)
        events = get_event_logger(import_id, enabled=self.emit_events)
        document = RawDocument(content=content, media_type=normalize_media_type(media_type))

        started = time.time()
        events.import_start(metadata={"media_type": document.media_type, "bytes": len(content)})
        log.info(f"Importing {document.media_type} resume ({len(content)} bytes)")

        try:
            with StageContext(events, "text_extraction") as ctx:
                markdown = self.text_extractor.extract(document)
                ctx.add_metadata("characters", len(markdown))

            with StageContext(events, "profile_extraction") as ctx:
                extraction = self.profile_extractor.extract(markdown)
                ctx.add_metadata("warnings", len(extraction.warnings))
        except ResumeImportError as e:
            log.warning(f"Import failed with status {e.status}: {e.message}")
            events.import_complete(
                status="error",
                duration_ms=int((time.time() - started) * 1000),
                metadata={"status_code": e.status},
            )
            raise

        events.import_complete(duration_ms=int((time.time() - started) * 1000))
        log.info(
            f"Import complete: {len(extraction.warnings)} warnings, "
            f"{len(extraction.work_experiences)} work experiences extracted"
        )

        return ResumeImportResponse(
            **{name: getattr(extraction, name) for name in type(extraction).model_fields},
            markdown=markdown,
        )


def import_profile_from_resume(content: bytes, media_type: Optional[str]) -> ResumeImportResponse:
    """Convenience wrapper around a default ResumeImportService."""
    return ResumeImportService().import_profile_from_resume(content, media_type)
