"""
Tests for POST /api/profile/resume-import
"""

from unittest.mock import MagicMock

from src.common.error_handling import UpstreamServiceError
from src.resume_import.profile_extractor import WARN_AI_NOT_CONFIGURED
from src.resume_import.service import ResumeImportService

URL = "/api/profile/resume-import"

RESUME = (
    b"Jane Doe\n"
    b"jane.doe@example.com | +1 (555) 123-4567\n"
    b"linkedin.com/in/janedoe\n"
)


def _upload(content=RESUME, content_type="text/plain", name="resume.txt"):
    return {"file": (name, content, content_type)}


class TestResumeImport:

    def test_plain_text_import(self, client, auth_headers):
        response = client.post(URL, headers=auth_headers, files=_upload())

        assert response.status_code == 200
        data = response.json()
        assert data["profile"]["firstName"] == "Jane"
        assert data["profile"]["lastName"] == "Doe"
        assert data["profile"]["email"] == "jane.doe@example.com"
        assert data["profile"]["linkedinUrl"] == "https://linkedin.com/in/janedoe"
        assert data["workExperiences"] == []
        assert data["markdown"].startswith("Jane Doe")
        assert WARN_AI_NOT_CONFIGURED in data["warnings"]

    def test_media_type_parameters_are_ignored(self, client, auth_headers):
        response = client.post(
            URL, headers=auth_headers, files=_upload(content_type="text/plain; charset=utf-8")
        )

        assert response.status_code == 200

    def test_no_file(self, client, auth_headers):
        response = client.post(URL, headers=auth_headers, data={"note": "no file"})

        assert response.status_code == 400
        assert response.json()["detail"] == "No file uploaded."

    def test_empty_file(self, client, auth_headers):
        response = client.post(URL, headers=auth_headers, files=_upload(content=b""))

        assert response.status_code == 400
        assert response.json()["detail"] == "Uploaded file is empty."

    def test_unsupported_type(self, client, auth_headers):
        response = client.post(
            URL, headers=auth_headers, files=_upload(b"\x89PNG", "image/png", "photo.png")
        )

        assert response.status_code == 415

    def test_file_too_large(self, client, auth_headers, monkeypatch):
        from profile_service.config import settings

        monkeypatch.setattr(settings, "max_upload_bytes", 16)

        response = client.post(URL, headers=auth_headers, files=_upload())

        assert response.status_code == 413
        assert "too large" in response.json()["detail"]


class TestResumeImportFailures:

    def _override_service(self, side_effect):
        from profile_service.app import app
        from profile_service.routes.resume_import import get_import_service

        service = MagicMock(spec=ResumeImportService)
        service.import_profile_from_resume.side_effect = side_effect
        app.dependency_overrides[get_import_service] = lambda: service
        return service

    def test_upstream_failure_is_502(self, client, auth_headers):
        self._override_service(UpstreamServiceError("OCR provider failed"))

        response = client.post(
            URL, headers=auth_headers, files=_upload(b"%PDF-1.7", "application/pdf", "cv.pdf")
        )

        assert response.status_code == 502
        assert response.json()["detail"] == "OCR provider failed"

    def test_unexpected_failure_is_500(self, client, auth_headers):
        self._override_service(RuntimeError("boom"))

        response = client.post(URL, headers=auth_headers, files=_upload())

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to import resume."

    def test_service_receives_normalized_media_type(self, client, auth_headers):
        service = self._override_service(UpstreamServiceError("stop"))

        client.post(
            URL, headers=auth_headers, files=_upload(b"%PDF", "Application/PDF", "cv.pdf")
        )

        content, media_type = service.import_profile_from_resume.call_args[0]
        assert content == b"%PDF"
        assert media_type == "application/pdf"


class TestResumeImportAuth:

    def test_invalid_token(self, client, invalid_auth_headers):
        response = client.post(URL, headers=invalid_auth_headers, files=_upload())

        assert response.status_code == 401

    def test_missing_user(self, client, auth_headers):
        headers = {"Authorization": auth_headers["Authorization"]}

        response = client.post(URL, headers=headers, files=_upload())

        assert response.status_code == 401
