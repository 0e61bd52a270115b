"""
Text Extractor: document bytes + declared media type -> resume text.

Plain text is decoded locally. PDFs (and unlabelled binaries) go to Mistral
OCR inline as a base64 data URL. Word documents take the upload, sign,
process route with the temporary upload deleted afterwards. The result is the
markdown of every OCR page joined by a blank line.
"""

import base64
import logging
import uuid
from typing import Any, Mapping, Optional

from src.common.error_handling import (
    ResumeInputError,
    UnsupportedMediaTypeError,
    UpstreamServiceError,
    log_on_exception,
)
from src.resume_import.normalizers import string_or_none
from src.resume_import.ocr_client import MistralOCRClient
from src.resume_import.types import RawDocument

logger = logging.getLogger(__name__)

PLAIN_TEXT = "text/plain"
PDF = "application/pdf"
OCTET_STREAM = "application/octet-stream"
MSWORD = "application/msword"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

INLINE_OCR_TYPES = frozenset({PDF, OCTET_STREAM})
WORD_EXTENSIONS = {MSWORD: ".doc", DOCX: ".docx"}
SUPPORTED_MEDIA_TYPES = frozenset({PLAIN_TEXT, *INLINE_OCR_TYPES, *WORD_EXTENSIONS})


def normalize_media_type(media_type: Optional[str]) -> str:
    """Lower-case, drop parameters; a missing type counts as a generic binary."""
    if not media_type:
        return OCTET_STREAM
    essence = media_type.split(";", 1)[0].strip().lower()
    return essence or OCTET_STREAM


def extract_ocr_markdown(response: Mapping[str, Any]) -> Optional[str]:
    """
    Text of an OCR response, or None when it holds nothing usable.

    Pages are taken in index order; each contributes its markdown, else its
    plain text. A whole-document annotation is the fallback when no page
    yields text.
    """
    pages = response.get("pages") or []
    ordered = sorted(
        (page for page in pages if isinstance(page, Mapping)),
        key=lambda page: page.get("index") if isinstance(page.get("index"), int) else 0,
    )

    sections = []
    for page in ordered:
        text = string_or_none(page.get("markdown")) or string_or_none(page.get("text"))
        if text:
            sections.append(text)

    if sections:
        return "\n\n".join(sections)

    return string_or_none(response.get("document_annotation"))


class TextExtractor:
    """
    Extracts resume text, calling Mistral OCR once for binary documents.

    Usage:
        extractor = TextExtractor()
        text = extractor.extract(RawDocument(content=data, media_type="application/pdf"))
    """

    def __init__(self, ocr_client: Optional[MistralOCRClient] = None):
        self._ocr_client = ocr_client

    @property
    def ocr_client(self) -> MistralOCRClient:
        if self._ocr_client is None:
            self._ocr_client = MistralOCRClient()
        return self._ocr_client

    def extract(self, document: RawDocument) -> str:
        """
        Raises:
            ResumeInputError: Plain text with no readable content (400)
            UnsupportedMediaTypeError: Media type OCR cannot handle (415)
            UpstreamServiceError: OCR failed or returned no text (502)
        """
        media_type = normalize_media_type(document.media_type)

        if media_type == PLAIN_TEXT:
            return self._decode_plain_text(document.content)

        if media_type not in SUPPORTED_MEDIA_TYPES:
            raise UnsupportedMediaTypeError("Unsupported resume file type for OCR.")

        try:
            with log_on_exception(logger, f"Mistral OCR ({media_type})", level=logging.ERROR):
                response = self._run_ocr(document.content, media_type)
        except Exception as e:
            raise UpstreamServiceError(
                "Unable to process the resume with Mistral OCR. Please try again.",
                cause=e,
            ) from e

        markdown = extract_ocr_markdown(response)
        if markdown is None:
            logger.error("Mistral OCR response contained no page text")
            raise UpstreamServiceError("Mistral OCR response did not include markdown content.")

        logger.info(f"OCR extracted {len(markdown)} characters from {media_type}")
        return markdown

    def _decode_plain_text(self, content: bytes) -> str:
        text = content.decode("utf-8-sig", errors="replace").strip()
        if not text:
            raise ResumeInputError("Uploaded text file did not contain readable content.")
        return text

    def _run_ocr(self, content: bytes, media_type: str) -> Mapping[str, Any]:
        client = self.ocr_client

        if media_type in INLINE_OCR_TYPES:
            encoded = base64.b64encode(content).decode("ascii")
            return client.process_document(f"data:{PDF};base64,{encoded}")

        file_name = f"{uuid.uuid4()}{WORD_EXTENSIONS[media_type]}"
        with client.uploaded_file(content, file_name, media_type) as file_id:
            signed_url = client.get_signed_url(file_id)
            return client.process_document(signed_url)
