"""Debug/audit trail for a review session.

Records are kept in memory in a bounded ring: once ``capacity`` is reached the
oldest record is dropped for every new one. The ring is written out as a flat
text transcript on export, after a job, and at session end.

Usage:
    log = DebugLog("media_sorter", capacity=500)
    log.log_user_action("mark", path="/photos/a.jpg", cursor=0)
    log.log_operation("send_to_trash", file_count=3, files=[...])
    log.flush("export", output_dir)
"""
from __future__ import annotations

import json
import logging
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Deque, List, Optional

from .models import DebugLogEntry

LOGGER = logging.getLogger(__name__)

DEFAULT_CAPACITY = 500


class DebugLog:
    def __init__(self, app_name: str = "media_sorter", capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.app_name = app_name
        self.capacity = capacity
        self._entries: Deque[DebugLogEntry] = deque(maxlen=capacity)
        self.session_id = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        self.dropped = 0

    def __len__(self) -> int:
        return len(self._entries)

    def log_action(self, action: str, **details: Any) -> DebugLogEntry:
        entry = DebugLogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            action=action,
            details=details,
        )
        if len(self._entries) == self.capacity:
            self.dropped += 1
        self._entries.append(entry)
        LOGGER.debug("%s %s", action, details)
        return entry

    def log_user_action(self, action: str, **details: Any) -> DebugLogEntry:
        """Log a user decision (mark, keep, undo, open folder...)."""
        return self.log_action(f"user:{action}", **details)

    def log_operation(
        self,
        operation: str,
        file_count: Optional[int] = None,
        files: Optional[List[str]] = None,
        notes: Optional[str] = None,
    ) -> DebugLogEntry:
        """Log a file operation, keeping only a sample of long file lists."""
        details: dict = {"file_count": file_count, "notes": notes}
        if files and len(files) <= 10:
            details["files"] = list(files)
        elif files:
            details["files_sample"] = list(files[:5])
        return self.log_action(f"op:{operation}", **details)

    def entries(self) -> List[DebugLogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.dropped = 0

    def render(self) -> str:
        lines = [f"# {self.app_name} debug log, session {self.session_id}"]
        if self.dropped:
            lines.append(f"# {self.dropped} older entries dropped")
        for entry in self._entries:
            details = json.dumps(entry.details, sort_keys=True, default=str)
            lines.append(f"[{entry.timestamp}] {entry.action} {details}")
        return "\n".join(lines) + "\n"

    def log_filename(self, action: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now()
        safe_action = "".join(c if c.isalnum() or c in {"-", "_"} else "_" for c in action)
        return f"{self.app_name}_log_{safe_action}_{now.strftime('%d-%m-%Y')}.txt"

    def flush(self, action: str, output_dir: Path, now: Optional[datetime] = None) -> Path:
        """Append the current transcript to the action/day file and return its path."""
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / self.log_filename(action, now)
        try:
            with path.open("a", encoding="utf-8") as handle:
                handle.write(self.render())
        except OSError as exc:
            LOGGER.error("Failed to write debug log %s: %s", path, exc)
            raise
        LOGGER.info("Debug log written to %s", path)
        return path
