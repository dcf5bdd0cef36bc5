"""
Structured JSON logger: append-only, one object per line (.jsonl).

Usage:
    from tripslot.modules.observability.logger import StructuredLogger

    with StructuredLogger("/tmp/tripslot-logs") as perf:
        schedule_activities(..., perf_logger=perf, session_id="req_42")

Each session writes to  <logs_dir>/<session_id>.jsonl; characters outside
[A-Za-z0-9_-] are replaced so a session id never leaves logs_dir.  Callers
own the logger; the scheduling engine only writes to one when it is handed in.
"""

from __future__ import annotations

import json
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import IO

from tripslot import config

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
MAX_SESSION_ID_LENGTH = 64


def safe_session_filename(session_id: str) -> str:
    """File stem for *session_id*: only [A-Za-z0-9_-], at most 64 characters."""
    stem = _UNSAFE_CHARS.sub("_", str(session_id))[:MAX_SESSION_ID_LENGTH]
    return stem or "default"


class StructuredLogger:
    """Thread-safe, append-only JSONL logger."""

    def __init__(self, logs_dir: Path | str | None = None) -> None:
        self._logs_dir = Path(logs_dir) if logs_dir else Path(config.LOGS_DIR)
        self._lock = threading.Lock()
        self._handles: dict[str, IO[str]] = {}  # session_id -> file handle

    # ── public API ────────────────────────────────────────────────────────

    @property
    def logs_dir(self) -> Path:
        return self._logs_dir

    @property
    def open_sessions(self) -> list[str]:
        with self._lock:
            return sorted(self._handles)

    def log(self, session_id: str, event_type: str, payload: dict) -> None:
        """Append one structured JSON record to ``<session_id>.jsonl``."""
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": session_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(session_id)
            if fh is None:
                fh = self._open(session_id)
            fh.write(line)
            fh.flush()

    def close(self, session_id: str | None = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if session_id:
                fh = self._handles.pop(session_id, None)
                if fh:
                    fh.close()
            else:
                for fh in self._handles.values():
                    fh.close()
                self._handles.clear()

    def __enter__(self) -> "StructuredLogger":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, session_id: str) -> IO[str]:
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{safe_session_filename(session_id)}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[session_id] = fh
        return fh
