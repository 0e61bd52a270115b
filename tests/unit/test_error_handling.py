"""
Unit tests for src/common/error_handling.py
"""

import logging

import pytest
from unittest.mock import MagicMock

from src.common.error_handling import (
    DraftCommitError,
    DraftNotFoundError,
    DraftStateError,
    FileTooLargeError,
    ResumeImportError,
    ResumeInputError,
    UnsupportedMediaTypeError,
    UpstreamServiceError,
    log_on_exception,
    safe_execute,
)


class TestErrorTaxonomy:

    @pytest.mark.parametrize(
        "error_cls,status",
        [
            (ResumeImportError, 400),
            (ResumeInputError, 400),
            (FileTooLargeError, 413),
            (UnsupportedMediaTypeError, 415),
            (UpstreamServiceError, 502),
        ],
    )
    def test_default_statuses(self, error_cls, status):
        error = error_cls("message")

        assert error.status == status
        assert error.message == "message"
        assert str(error) == "message"

    def test_explicit_status_and_cause(self):
        cause = RuntimeError("boom")
        error = ResumeImportError("failed", status=503, cause=cause)

        assert error.status == 503
        assert error.cause is cause

    @pytest.mark.parametrize(
        "error_cls,status",
        [(DraftNotFoundError, 404), (DraftStateError, 409), (DraftCommitError, 502)],
    )
    def test_staging_statuses(self, error_cls, status):
        assert error_cls("x").status == status


class TestSafeExecute:

    def test_returns_result(self):
        assert safe_execute(lambda a, b: a + b, 1, 2) == 3

    def test_failure_returns_fallback_and_warns(self):
        logger = MagicMock()

        def fail():
            raise RuntimeError("cleanup failed")

        result = safe_execute(fail, operation_name="cleanup", logger=logger, fallback="fallback")

        assert result == "fallback"
        logger.warning.assert_called_once()
        assert "cleanup" in logger.warning.call_args[0][0]

    def test_critical_failure_logs_error(self):
        logger = MagicMock()

        safe_execute(MagicMock(side_effect=ValueError("x")), logger=logger, critical=True)

        logger.error.assert_called_once()
        logger.warning.assert_not_called()


class TestLogOnException:

    def test_logs_and_reraises(self):
        logger = MagicMock()

        with pytest.raises(ValueError):
            with log_on_exception(logger, "Mistral OCR", level=logging.ERROR):
                raise ValueError("bad")

        level, message = logger.log.call_args[0]
        assert level == logging.ERROR
        assert "Mistral OCR" in message

    def test_quiet_on_success(self):
        logger = MagicMock()

        with log_on_exception(logger, "noop"):
            pass

        logger.log.assert_not_called()
