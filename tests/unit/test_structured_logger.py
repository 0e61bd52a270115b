"""
Unit tests for src/common/structured_logger.py and src/common/logger.py
"""

import json
import logging

import pytest
from unittest.mock import MagicMock

from src.common.logger import ImportLogger, get_logger
from src.common.structured_logger import (
    EventType,
    ImportEvent,
    ImportEventLogger,
    StageContext,
    get_event_logger,
)


class TestImportEvent:
    """Tests for ImportEvent dataclass."""

    def test_to_json_includes_required_fields(self):
        event = ImportEvent(
            timestamp="2025-11-30T10:00:00Z",
            event="stage_start",
            import_id="imp123",
        )
        result = json.loads(event.to_json())

        assert result == {
            "timestamp": "2025-11-30T10:00:00Z",
            "event": "stage_start",
            "import_id": "imp123",
        }

    def test_to_json_excludes_none_values(self):
        event = ImportEvent(
            timestamp="2025-11-30T10:00:00Z",
            event="stage_complete",
            import_id="imp123",
            stage="text_extraction",
            duration_ms=1200,
            metadata={"characters": 5400},
        )
        result = json.loads(event.to_json())

        assert result["stage"] == "text_extraction"
        assert result["metadata"]["characters"] == 5400
        assert "status" not in result
        assert "error" not in result


class TestImportEventLogger:

    @pytest.fixture
    def events(self):
        return get_event_logger("imp123")

    def test_emits_through_events_logger(self, events, caplog):
        caplog.set_level(logging.INFO, logger="resume_import.events")

        events.import_start(metadata={"bytes": 10})

        record = caplog.records[-1]
        assert record.name == "resume_import.events"
        assert json.loads(record.getMessage())["event"] == EventType.IMPORT_START.value

    def test_disabled_logger_emits_nothing(self, caplog):
        caplog.set_level(logging.INFO, logger="resume_import.events")

        ImportEventLogger("imp123", enabled=False).import_start()

        assert [r for r in caplog.records if r.name == "resume_import.events"] == []

    def test_stage_duration_is_calculated(self, events):
        events.emit = MagicMock()

        events.stage_start("ocr")
        events.stage_complete("ocr")

        kwargs = events.emit.call_args.kwargs
        assert kwargs["event"] == "stage_complete"
        assert kwargs["status"] == "success"
        assert kwargs["duration_ms"] >= 0


class TestStageContext:

    def test_success_emits_complete_with_metadata(self):
        events = ImportEventLogger("imp123")
        events.emit = MagicMock()

        with StageContext(events, "profile_extraction") as ctx:
            ctx.add_metadata("warnings", 2)

        first, last = events.emit.call_args_list
        assert first.kwargs["event"] == "stage_start"
        assert last.kwargs["event"] == "stage_complete"
        assert last.kwargs["metadata"] == {"warnings": 2}

    def test_error_is_logged_and_reraised(self):
        events = ImportEventLogger("imp123")
        events.emit = MagicMock()

        with pytest.raises(RuntimeError):
            with StageContext(events, "text_extraction"):
                raise RuntimeError("OCR down")

        last = events.emit.call_args
        assert last.kwargs["event"] == "stage_error"
        assert last.kwargs["error"] == "OCR down"


class TestImportLogger:

    def test_prefix_has_import_id_and_stage(self):
        logger = get_logger("test", import_id="abcdef123456", stage="text_extraction")

        assert logger._format_message("hello") == "[import:abcdef12] [text_extraction] hello"

    def test_no_context_means_no_prefix(self):
        assert ImportLogger("test")._format_message("hello") == "hello"

    def test_with_stage_keeps_import_id(self):
        logger = get_logger("test", import_id="abcdef123456").with_stage("profile_extraction")

        assert logger._format_message("x") == "[import:abcdef12] [profile_extraction] x"

    def test_messages_reach_stdlib_logger(self, caplog):
        caplog.set_level(logging.INFO, logger="test.import")

        get_logger("test.import", import_id="abcdef123456").info("started")

        assert caplog.records[-1].getMessage() == "[import:abcdef12] started"
