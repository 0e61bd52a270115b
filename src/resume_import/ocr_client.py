"""
Mistral OCR REST client.

Covers the four calls resume import needs:
- process a document reference (inline data URL or signed URL)
- upload a document to temporary OCR storage
- issue a signed URL for an uploaded document
- delete an uploaded document

``uploaded_file`` wraps upload and deletion as a scoped resource: once the
upload succeeded, deletion runs on every exit path and a deletion failure is
only logged.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import requests

from src.common.config import Config
from src.common.error_handling import safe_execute

logger = logging.getLogger(__name__)


class MistralOCRError(Exception):
    """Mistral answered, but not with what the protocol requires."""
    pass


class MistralOCRClient:
    """Thin wrapper over the Mistral OCR and Files endpoints."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else Config.MISTRAL_API_KEY
        self.base_url = (base_url or Config.MISTRAL_BASE_URL).rstrip("/")
        self.model = model or Config.MISTRAL_OCR_MODEL
        self.timeout = timeout or Config.OCR_TIMEOUT_SECONDS

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise MistralOCRError("MISTRAL_API_KEY is not configured")
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    def process_document(self, document_url: str) -> Dict[str, Any]:
        """
        Run OCR on a document reference.

        Args:
            document_url: ``data:`` URL or signed https URL

        Returns:
            Raw OCR response (``pages`` list, optional ``document_annotation``)

        Raises:
            requests.exceptions.RequestException: Transport or HTTP error
            MistralOCRError: Response body is not a JSON object
        """
        response = requests.post(
            f"{self.base_url}/v1/ocr",
            headers=self._headers(),
            json={
                "model": self.model,
                "document": {
                    "type": "document_url",
                    "document_url": document_url,
                },
                "include_image_base64": False,
            },
            timeout=self.timeout,
        )
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise MistralOCRError("OCR response was not a JSON object")
        return payload

    def upload_file(self, content: bytes, file_name: str, media_type: str) -> str:
        """Upload a document for OCR and return its file id."""
        response = requests.post(
            f"{self.base_url}/v1/files",
            headers=self._headers(),
            files={"file": (file_name, content, media_type)},
            data={"purpose": "ocr"},
            timeout=self.timeout,
        )
        response.raise_for_status()

        file_id = response.json().get("id")
        if not file_id:
            raise MistralOCRError("File upload response did not include an id")
        logger.debug(f"Uploaded {file_name} to Mistral as {file_id}")
        return file_id

    def get_signed_url(self, file_id: str, expiry_hours: Optional[int] = None) -> str:
        """Time-limited URL Mistral can fetch the uploaded document from."""
        response = requests.get(
            f"{self.base_url}/v1/files/{file_id}/url",
            headers=self._headers(),
            params={"expiry": expiry_hours or Config.OCR_SIGNED_URL_EXPIRY_HOURS},
            timeout=self.timeout,
        )
        response.raise_for_status()

        url = response.json().get("url")
        if not url:
            raise MistralOCRError(f"Signed URL response for {file_id} did not include a url")
        return url

    def delete_file(self, file_id: str) -> None:
        response = requests.delete(
            f"{self.base_url}/v1/files/{file_id}",
            headers=self._headers(),
            timeout=self.timeout,
        )
        response.raise_for_status()
        logger.debug(f"Deleted Mistral file {file_id}")

    @contextmanager
    def uploaded_file(self, content: bytes, file_name: str, media_type: str) -> Iterator[str]:
        """
        Upload a document and yield its id; always delete it afterwards.

        Usage:
            with client.uploaded_file(content, "resume.docx", media_type) as file_id:
                url = client.get_signed_url(file_id)
                response = client.process_document(url)
        """
        file_id = self.upload_file(content, file_name, media_type)
        try:
            yield file_id
        finally:
            safe_execute(
                self.delete_file,
                file_id,
                operation_name=f"Mistral file cleanup {file_id}",
                logger=logger,
            )
