"""NDJSON event file for one log directory.

Every event is one JSON object per line in ``<log_dir>/events.ndjson``,
serialised with sorted keys.  Appends hold an exclusive ``fcntl.flock``
and reads a shared one, so concurrent ``gridcalc compute`` runs can share
a directory.  Without ``fcntl`` (Windows) the file is used unlocked.
"""

from __future__ import annotations

import json
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from pydantic import ValidationError

from gridcalc.logging.events import EventLevel, EventType, GridEvent

try:
    import fcntl

    _HAS_FCNTL = True
except ImportError:
    _HAS_FCNTL = False
    print("[gridcalc] fcntl not available; event log is not locked", file=sys.stderr)

EVENTS_FILE = "events.ndjson"


@contextmanager
def _opened(path: Path, flags: int, lock: int | None) -> Iterator[int]:
    """Open *path* as a raw fd, holding *lock* for the duration."""
    fd = os.open(str(path), flags, 0o644)
    try:
        if _HAS_FCNTL and lock is not None:
            fcntl.flock(fd, lock)
        yield fd
    finally:
        if _HAS_FCNTL and lock is not None:
            fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)


class EventSink:
    """Appends GridEvents to, and reads them back from, one log directory."""

    def __init__(self, log_dir: Path, *, fsync: bool = False) -> None:
        self.log_dir = Path(log_dir)
        self._fsync = fsync
        self.log_dir.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self.log_dir / EVENTS_FILE

    def write(self, event: GridEvent) -> None:
        record = json.dumps(event.model_dump(mode="json"), sort_keys=True)
        lock = fcntl.LOCK_EX if _HAS_FCNTL else None
        with _opened(self.path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, lock) as fd:
            os.write(fd, (record + "\n").encode("utf-8"))
            if self._fsync:
                os.fsync(fd)

    def read(
        self,
        *,
        level: EventLevel | str | None = None,
        event_type: EventType | str | None = None,
        limit: int | None = 200,
    ) -> list[GridEvent]:
        """Events matching the filters, newest first.

        Lines that are not valid events are skipped.
        """
        wanted_level = EventLevel(level) if level else None
        wanted_type = EventType(event_type) if event_type else None

        matched = [
            event
            for event in self._load()
            if (wanted_level is None or event.level is wanted_level)
            and (wanted_type is None or event.event_type is wanted_type)
        ]
        matched.reverse()
        return matched if limit is None else matched[:limit]

    def _load(self) -> Iterator[GridEvent]:
        if not self.path.exists():
            return
        lock = fcntl.LOCK_SH if _HAS_FCNTL else None
        with _opened(self.path, os.O_RDONLY, lock) as fd:
            raw = os.read(fd, os.fstat(fd).st_size).decode("utf-8", errors="replace")
        for line in raw.splitlines():
            if not line.strip():
                continue
            try:
                yield GridEvent.model_validate_json(line)
            except ValidationError:
                continue
