"""Timing and NDJSON lifecycle event emission."""

from __future__ import annotations

import json
import sys
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, TextIO


class Timer:
    """Context-manager timer for a statement's duration_ms."""

    def __init__(self) -> None:
        self.start: float = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "Timer":
        self.start = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.elapsed_ms = int((time.perf_counter() - self.start) * 1000)


class EditorEvent(str, Enum):
    """Lifecycle events an editing session reports."""

    COMMAND_APPLIED = "command.applied"
    COMMAND_FAILED = "command.failed"
    TABLE_IMPORTED = "table.imported"
    HISTORY_UNDO = "history.undo"
    HISTORY_REDO = "history.redo"
    HISTORY_EVICTED = "history.evicted"


class EventEmitter:
    """Writes one NDJSON line per editor event (stderr by default).

    Each line carries a per-emitter ``seq`` so a consumer can tell events of
    one session apart and notice gaps.
    """

    def __init__(self, enabled: bool = False, stream: TextIO | None = None) -> None:
        self.enabled = enabled
        self._stream = stream
        self._seq = 0

    def emit(self, event: EditorEvent, data: dict[str, Any] | None = None) -> None:
        if not self.enabled:
            return
        self._seq += 1
        payload = {
            "event": EditorEvent(event).value,
            "seq": self._seq,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data or {},
        }
        stream = self._stream or sys.stderr
        stream.write(json.dumps(payload, default=str) + "\n")
        stream.flush()
