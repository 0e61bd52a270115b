"""
Logging setup for the resume import pipeline.

Log lines of one import carry a short ``[import:<id>]`` prefix and the
pipeline stage, so a single upload can be followed through OCR, profile
extraction and staging with a plain grep.
"""

import logging
import os
import sys
from typing import Any, Optional

# Third-party loggers that are chatty at INFO (one line per HTTP request)
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3", "pymongo")

SIMPLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", '
    '"name": "%(name)s", "message": "%(message)s"}'
)


def _debug_from_env() -> bool:
    return os.getenv("DEBUG_MODE", "false").lower() == "true"


class ImportLogger:
    """
    Logger bound to one import and, optionally, one stage.

    Wraps a stdlib logger; everything it emits goes through the handlers
    installed by ``setup_logging``.
    """

    def __init__(
        self,
        name: str,
        import_id: Optional[str] = None,
        stage: Optional[str] = None,
        debug_mode: Optional[bool] = None,
    ):
        self.logger = logging.getLogger(name)
        self.import_id = import_id
        self.stage = stage
        self._debug_mode = _debug_from_env() if debug_mode is None else debug_mode

        if self._debug_mode:
            self.logger.setLevel(logging.DEBUG)

    def with_stage(self, stage: str) -> "ImportLogger":
        """Same import, another stage."""
        return ImportLogger(self.logger.name, self.import_id, stage, self._debug_mode)

    def _format_message(self, message: str) -> str:
        prefix = []
        if self.import_id:
            prefix.append(f"[import:{self.import_id[:8]}]")
        if self.stage:
            prefix.append(f"[{self.stage}]")
        return " ".join([*prefix, message])

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self._format_message(message), **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)


def setup_logging(level: str = "INFO", format: str = "simple") -> None:
    """
    Configure the root logger once at service start.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        format: "simple" for humans, "json" for one JSON object per line
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if format == "json":
        handler.setFormatter(logging.Formatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    # Request-level chatter only when debugging
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(
    name: str,
    import_id: Optional[str] = None,
    stage: Optional[str] = None,
    debug_mode: Optional[bool] = None,
) -> ImportLogger:
    """Get an ImportLogger; ``debug_mode`` defaults to the DEBUG_MODE env var."""
    return ImportLogger(name, import_id, stage, debug_mode)
