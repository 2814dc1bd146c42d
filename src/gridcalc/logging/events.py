"""Event schema for ingest, compute and render, and the emit helpers.

Timestamps are UTC ISO-8601 with a ``Z`` suffix.  Emitting never raises:
with no log directory configured events are dropped, and a failing sink
is reported on stderr at most once a minute.
"""

from __future__ import annotations

import sys
import time
import traceback
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from gridcalc.logging.sink import EventSink


class EventLevel(str, Enum):
    info = "info"
    warning = "warning"
    error = "error"


class EventType(str, Enum):
    ingest_completed = "ingest_completed"
    ingest_failed = "ingest_failed"
    compute_started = "compute_started"
    compute_completed = "compute_completed"
    cell_error = "cell_error"
    render_completed = "render_completed"


MAX_CONTEXT_STR = 256
_TRUNCATED = "...[truncated]"


def _clip(value: Any) -> Any:
    if isinstance(value, str):
        return value if len(value) <= MAX_CONTEXT_STR else value[:MAX_CONTEXT_STR] + _TRUNCATED
    if isinstance(value, dict):
        return {k: _clip(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clip(v) for v in value]
    return value


def truncate_context(context: dict[str, Any]) -> dict[str, Any]:
    """Copy of *context* with every string, at any depth, cut to 256 chars."""
    return _clip(context)


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class GridEvent(BaseModel):
    """One structured log record.

    ``context`` carries event-specific fields, e.g. ``{"addr": "B2",
    "marker": "#CIRC!"}`` for ``cell_error``.  ``error_code`` is the
    ``code`` of the GridError behind a warning or error.
    """

    schema_version: int = 1
    ts: str = Field(default_factory=_utc_now)
    level: EventLevel
    event_type: EventType
    context: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    error_code: str | None = None


# ---------------------------------------------------------------------------
# Active sink
# ---------------------------------------------------------------------------

_sink: EventSink | None = None


def set_log_dir(log_dir: Path | str | None, *, fsync: bool = False) -> None:
    """Send events to *log_dir*, or stop logging when it is ``None``."""
    global _sink
    from gridcalc.logging.sink import EventSink

    _sink = None if log_dir is None else EventSink(Path(log_dir), fsync=fsync)


def get_sink() -> EventSink | None:
    return _sink


class _Throttle:
    """Lets a call through at most once per *interval* seconds."""

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self._last: float | None = None

    def ready(self) -> bool:
        now = time.monotonic()
        if self._last is not None and now - self._last < self.interval:
            return False
        self._last = now
        return True


_failure_notice = _Throttle(60.0)


def emit(event: GridEvent) -> None:
    """Write *event* to the active sink.  Never raises."""
    sink = _sink
    if sink is None:
        return
    try:
        sink.write(event.model_copy(update={"context": truncate_context(event.context)}))
    except Exception:
        if _failure_notice.ready():
            print(f"[gridcalc] event logging failed: {traceback.format_exc()}", file=sys.stderr)


def _emit_at(
    level: EventLevel, event_type: EventType, message: str, context: dict[str, Any] | None, error_code: str | None
) -> None:
    emit(GridEvent(level=level, event_type=event_type, message=message, context=context or {}, error_code=error_code))


def emit_info(event_type: EventType, message: str, context: dict[str, Any] | None = None) -> None:
    _emit_at(EventLevel.info, event_type, message, context, None)


def emit_warning(event_type: EventType, message: str, context: dict[str, Any] | None = None, *, error_code: str | None = None) -> None:
    _emit_at(EventLevel.warning, event_type, message, context, error_code)


def emit_error(event_type: EventType, message: str, context: dict[str, Any] | None = None, *, error_code: str | None = None) -> None:
    _emit_at(EventLevel.error, event_type, message, context, error_code)
