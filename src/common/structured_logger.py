"""
Structured JSON logger for resume import events.

Emits one JSON line per event for:
- Import start/complete tracking
- Stage start/complete/error tracking (text extraction, profile extraction, ...)

Usage:
    events = ImportEventLogger(import_id="abc123")
    with StageContext(events, "text_extraction") as ctx:
        text = extractor.extract(document)
        ctx.add_metadata("characters", len(text))
"""

import json
import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

_event_logger = logging.getLogger("resume_import.events")


class EventType(str, Enum):
    """Standard import event types."""
    IMPORT_START = "import_start"
    IMPORT_COMPLETE = "import_complete"
    STAGE_START = "stage_start"
    STAGE_COMPLETE = "stage_complete"
    STAGE_ERROR = "stage_error"


class StageStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ImportEvent:
    """Structured import event; None fields are omitted from the JSON line."""
    timestamp: str
    event: str
    import_id: str
    stage: Optional[str] = None
    status: Optional[str] = None
    duration_ms: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_json(self) -> str:
        data = {k: v for k, v in asdict(self).items() if v is not None}
        return json.dumps(data, default=str)


class ImportEventLogger:
    """
    Structured JSON logger for one resume import.

    Events go through the ``resume_import.events`` logger so that handlers
    configured by ``setup_logging`` decide where they land.
    """

    def __init__(self, import_id: str, enabled: bool = True):
        """
        Args:
            import_id: Import ID for correlation
            enabled: Whether to emit events (can disable for testing)
        """
        self.import_id = import_id
        self.enabled = enabled
        self._stage_start_times: Dict[str, float] = {}

    def _emit(self, event: ImportEvent) -> None:
        if self.enabled:
            _event_logger.info(event.to_json())

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def emit(
        self,
        event: str,
        stage: Optional[str] = None,
        status: Optional[str] = None,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        self._emit(
            ImportEvent(
                timestamp=self._now(),
                event=event,
                import_id=self.import_id,
                stage=stage,
                status=status,
                duration_ms=duration_ms,
                metadata=metadata,
                error=error,
            )
        )

    def _elapsed_ms(self, stage: str) -> Optional[int]:
        started = self._stage_start_times.pop(stage, None)
        if started is None:
            return None
        return int((time.time() - started) * 1000)

    def stage_start(self, stage: str) -> None:
        self._stage_start_times[stage] = time.time()
        self.emit(event=EventType.STAGE_START.value, stage=stage)

    def stage_complete(
        self,
        stage: str,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log stage complete.

        Duration is auto-calculated when stage_start was called and no
        explicit value is given.
        """
        if duration_ms is None:
            duration_ms = self._elapsed_ms(stage)
        else:
            self._stage_start_times.pop(stage, None)

        self.emit(
            event=EventType.STAGE_COMPLETE.value,
            stage=stage,
            status=StageStatus.SUCCESS.value,
            duration_ms=duration_ms,
            metadata=metadata,
        )

    def stage_error(
        self,
        stage: str,
        error: str,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if duration_ms is None:
            duration_ms = self._elapsed_ms(stage)
        else:
            self._stage_start_times.pop(stage, None)

        self.emit(
            event=EventType.STAGE_ERROR.value,
            stage=stage,
            status=StageStatus.ERROR.value,
            duration_ms=duration_ms,
            error=error,
            metadata=metadata,
        )

    def import_start(self, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.emit(event=EventType.IMPORT_START.value, metadata=metadata)

    def import_complete(
        self,
        status: str = StageStatus.SUCCESS.value,
        duration_ms: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.emit(
            event=EventType.IMPORT_COMPLETE.value,
            status=status,
            duration_ms=duration_ms,
            metadata=metadata,
        )


# ===== Context Manager for Stage Timing =====

class StageContext:
    """
    Context manager for automatic stage timing.

    Usage:
        with StageContext(events, "profile_extraction") as ctx:
            # ... do work ...
            ctx.add_metadata("tier", "heuristic")
    """

    def __init__(self, logger: ImportEventLogger, stage: str):
        self.logger = logger
        self.stage = stage
        self.metadata: Dict[str, Any] = {}
        self._start_time: float = 0

    def __enter__(self) -> "StageContext":
        self._start_time = time.time()
        self.logger.stage_start(self.stage)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        duration_ms = int((time.time() - self._start_time) * 1000)

        if exc_type is not None:
            self.logger.stage_error(
                self.stage,
                str(exc_val),
                duration_ms,
                self.metadata if self.metadata else None,
            )
            return False  # Re-raise exception

        self.logger.stage_complete(
            self.stage,
            duration_ms,
            self.metadata if self.metadata else None,
        )
        return False

    def add_metadata(self, key: str, value: Any) -> None:
        """Add metadata to be included in completion event."""
        self.metadata[key] = value


def get_event_logger(import_id: str, enabled: bool = True) -> ImportEventLogger:
    return ImportEventLogger(import_id, enabled)
