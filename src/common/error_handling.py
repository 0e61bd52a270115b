"""
Centralized error handling for the resume import pipeline.

Defines the error taxonomy (each error carries the HTTP status the API layer
maps it to) and small utilities for logging failures consistently.
"""

import logging
from typing import Any, Callable, Optional, TypeVar

# Type variable for generic return types
T = TypeVar("T")


class ResumeImportError(Exception):
    """
    Base error for a failed resume import.

    Attributes:
        message: User-facing message
        status: HTTP status code the API layer responds with
        cause: Underlying exception, if any
    """

    default_status = 400

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status if status is not None else self.default_status
        self.cause = cause


class ResumeInputError(ResumeImportError):
    """The uploaded document is missing, empty or unreadable."""

    default_status = 400


class FileTooLargeError(ResumeImportError):
    default_status = 413


class UnsupportedMediaTypeError(ResumeImportError):
    default_status = 415


class UpstreamServiceError(ResumeImportError):
    """The OCR provider failed or returned nothing usable."""

    default_status = 502


class StagingError(Exception):
    """Base error for invalid operations on an import session."""

    status = 400


class DraftNotFoundError(StagingError):
    status = 404


class DraftStateError(StagingError):
    """The draft is not in a state that allows the requested action."""

    status = 409


class DraftCommitError(StagingError):
    """Persisting a staged draft failed; the draft stays staged."""

    status = 502


def log_on_exception(
    logger: logging.Logger,
    operation: str,
    level: int = logging.WARNING,
    include_traceback: bool = False,
):
    """
    Context manager for logging exceptions without swallowing them.

    Usage:
        with log_on_exception(logger, "Mistral OCR", level=logging.ERROR):
            client.process_document(url)

    Args:
        logger: Logger instance to use
        operation: Operation description for the log message
        level: Log level (default: WARNING)
        include_traceback: Whether to include stack trace in log
    """

    class ExceptionLogger:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None:
                logger.log(
                    level,
                    f"[{operation}] Failed: {exc_val}",
                    exc_info=include_traceback,
                )
            # Never suppress
            return False

    return ExceptionLogger()


def safe_execute(
    func: Callable[..., T],
    *args,
    operation_name: str = "operation",
    logger: Optional[Any] = None,
    fallback: T = None,
    critical: bool = False,
    **kwargs,
) -> T:
    """
    Execute a best-effort function, logging instead of raising on failure.

    Only for calls whose failure must not change the outcome of the caller,
    such as deleting a temporary OCR upload.

    Args:
        func: Function to execute
        *args: Positional arguments for func
        operation_name: Name for logging
        logger: Logger instance (uses module logger if None)
        fallback: Value to return on failure
        critical: If True, log at ERROR level with traceback
        **kwargs: Keyword arguments for func

    Returns:
        Function result or fallback value on error
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    try:
        return func(*args, **kwargs)
    except Exception as e:
        if critical:
            logger.error(f"[{operation_name}] Failed: {e}", exc_info=True)
        else:
            logger.warning(f"[{operation_name}] Failed: {e}")
        return fallback
