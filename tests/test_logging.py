"""Tests for structured event logging: schema, sink, and emit helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from gridcalc.errors import MalformedHeaderError
from gridcalc.evaluator import Evaluator
from gridcalc.ingest import load_sheet
from gridcalc.logging import events
from gridcalc.logging.events import (
    EventLevel,
    EventType,
    GridEvent,
    emit,
    emit_error,
    emit_info,
    get_sink,
    set_log_dir,
    truncate_context,
)
from gridcalc.logging.sink import EVENTS_FILE, EventSink
from gridcalc.render import render_grid


class TestGridEvent:
    def test_defaults(self) -> None:
        event = GridEvent(level=EventLevel.info, event_type=EventType.compute_started)
        assert event.schema_version == 1
        assert event.ts.endswith("Z")
        assert event.context == {}
        assert event.error_code is None

    def test_serialises_enums_as_strings(self) -> None:
        event = GridEvent(level=EventLevel.error, event_type=EventType.ingest_failed, error_code="x")
        data = event.model_dump(mode="json")
        assert data["level"] == "error"
        assert data["event_type"] == "ingest_failed"


class TestTruncation:
    def test_long_strings_are_cut(self) -> None:
        out = truncate_context({"raw": "x" * 300, "n": 5})
        assert out["raw"] == "x" * 256 + "...[truncated]"
        assert out["n"] == 5

    def test_exact_limit_is_kept(self) -> None:
        assert truncate_context({"raw": "x" * 256}) == {"raw": "x" * 256}

    def test_nested_values(self) -> None:
        out = truncate_context({"inner": {"deeper": {"s": "y" * 400}}, "items": ["z" * 257, 1]})
        assert out["inner"]["deeper"]["s"].endswith("...[truncated]")
        assert out["items"][0].endswith("...[truncated]")
        assert out["items"][1] == 1


class TestEventSink:
    def test_write_and_read(self, tmp_path: Path) -> None:
        sink = EventSink(tmp_path / "logs")
        sink.write(GridEvent(level=EventLevel.info, event_type=EventType.compute_started))
        sink.write(GridEvent(level=EventLevel.warning, event_type=EventType.cell_error, error_code="c"))

        assert sink.path == tmp_path / "logs" / EVENTS_FILE
        lines = sink.path.read_text().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["event_type"] == "compute_started"

        recent = sink.read()
        assert [e.event_type for e in recent] == [EventType.cell_error, EventType.compute_started]
        assert recent[0].error_code == "c"

    def test_read_filters(self, tmp_path: Path) -> None:
        sink = EventSink(tmp_path, fsync=True)
        for _ in range(3):
            sink.write(GridEvent(level=EventLevel.info, event_type=EventType.render_completed))
        sink.write(GridEvent(level=EventLevel.error, event_type=EventType.ingest_failed))
        assert len(sink.read(level="info")) == 3
        assert len(sink.read(level=EventLevel.error)) == 1
        assert len(sink.read(event_type="ingest_failed")) == 1
        assert len(sink.read(limit=2)) == 2
        assert len(sink.read(limit=None)) == 4

    def test_read_skips_invalid_lines(self, tmp_path: Path) -> None:
        sink = EventSink(tmp_path)
        good = GridEvent(level=EventLevel.info, event_type=EventType.compute_started, message="kept")
        sink.path.write_text(
            '{"level": "info"}\nnot json\n\n' + good.model_dump_json() + "\n"
        )
        (event,) = sink.read()
        assert event.message == "kept"

    def test_read_missing_file(self, tmp_path: Path) -> None:
        assert EventSink(tmp_path).read() == []


class TestEmit:
    def test_no_sink_is_a_no_op(self) -> None:
        assert get_sink() is None
        emit_info(EventType.compute_started, "nothing happens")

    def test_set_log_dir(self, tmp_path: Path) -> None:
        set_log_dir(tmp_path)
        emit_error(EventType.ingest_failed, "bad", {"raw": "q" * 500}, error_code="malformed_header")
        (event,) = get_sink().read()
        assert event.level is EventLevel.error
        assert event.error_code == "malformed_header"
        assert event.context["raw"].endswith("...[truncated]")

        set_log_dir(None)
        assert get_sink() is None

    def test_emit_never_raises(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
        class BrokenSink:
            def write(self, event: GridEvent) -> None:
                raise OSError("disk full")

        monkeypatch.setattr(events, "_sink", BrokenSink())
        monkeypatch.setattr(events, "_failure_notice", events._Throttle(60.0))
        emit(GridEvent(level=EventLevel.info, event_type=EventType.compute_started))
        emit(GridEvent(level=EventLevel.info, event_type=EventType.compute_completed))

        err = capsys.readouterr().err
        assert err.count("event logging failed") == 1
        assert "disk full" in err


class TestPipelineEvents:
    def test_compute_emits_cell_errors(self, tmp_path: Path) -> None:
        set_log_dir(tmp_path)
        grid = Evaluator().compute(load_sheet(",A,B\n1,= A1 + A1,2\n"))
        render_grid(grid)

        sink = get_sink()
        types = [e.event_type.value for e in reversed(sink.read())]
        assert types == [
            "ingest_completed",
            "compute_started",
            "cell_error",
            "compute_completed",
            "render_completed",
        ]
        (cell_error,) = sink.read(event_type="cell_error")
        assert cell_error.level is EventLevel.warning
        assert cell_error.error_code == "circular_reference"
        assert cell_error.context == {"addr": "A1", "marker": "#CIRC!"}

        (completed,) = sink.read(event_type="compute_completed")
        assert completed.context["errors"] == 1
        assert completed.context["slots"] == 2

    def test_ingest_failure_is_logged(self, tmp_path: Path) -> None:
        set_log_dir(tmp_path)
        with pytest.raises(MalformedHeaderError):
            load_sheet("")
        (event,) = get_sink().read()
        assert event.event_type is EventType.ingest_failed
        assert event.error_code == "malformed_header"
