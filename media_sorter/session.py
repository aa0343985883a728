"""Review session state machine.

The session walks an ordered list of media entries with one cursor. Each
visited entry is either kept or marked for removal. Only the most recent
decision can be undone. When the cursor wraps from the last entry back to the
first, the session enters ``AWAITING_EXPORT`` and fires the cycle-complete
callback; this happens on every wrap, not just the first one.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from .audit import DebugLog
from .errors import SessionStateError
from .models import MediaEntry, RemovalManifest

LOGGER = logging.getLogger(__name__)


class SessionState(enum.Enum):
    EMPTY = "empty"
    REVIEWING = "reviewing"
    AWAITING_EXPORT = "awaiting_export"


@dataclass(frozen=True)
class Decision:
    """The single undoable decision. ``added`` is False when re-marking a path."""

    kind: str
    path: str
    added: bool = False


class ReviewSession:
    def __init__(
        self,
        on_cycle_complete: Optional[Callable[["ReviewSession"], None]] = None,
        debug_log: Optional[DebugLog] = None,
    ):
        self.on_cycle_complete = on_cycle_complete
        self.debug_log = debug_log
        self.folder: Optional[str] = None
        self.entries: List[MediaEntry] = []
        self.cursor = 0
        # dict keeps first-mark order
        self._marked: Dict[str, None] = {}
        self._last: Optional[Decision] = None
        self.state = SessionState.EMPTY
        self.cycles_completed = 0

    # --- read-only views -------------------------------------------------

    @property
    def marked(self) -> List[str]:
        return list(self._marked)

    @property
    def history(self) -> Optional[Decision]:
        return self._last

    @property
    def current(self) -> Optional[MediaEntry]:
        if not self.entries:
            return None
        return self.entries[self.cursor]

    def is_marked(self, entry: MediaEntry) -> bool:
        return entry.path in self._marked

    def __len__(self) -> int:
        return len(self.entries)

    # --- transitions -----------------------------------------------------

    def load_entries(self, entries: Sequence[MediaEntry], folder: Optional[str] = None) -> None:
        self.entries = list(entries)
        self.folder = folder
        self.cursor = 0
        self._marked.clear()
        self._last = None
        self.cycles_completed = 0
        self.state = SessionState.REVIEWING if self.entries else SessionState.EMPTY
        self._audit("load", folder=folder, count=len(self.entries))

    def mark(self) -> None:
        entry = self._require_entry("mark")
        added = entry.path not in self._marked
        if added:
            self._marked[entry.path] = None
        self._last = Decision("mark", entry.path, added)
        self._audit("mark", path=entry.path, cursor=self.cursor)
        self.advance()

    def keep(self) -> None:
        entry = self._require_entry("keep")
        self._last = Decision("keep", entry.path)
        self._audit("keep", path=entry.path, cursor=self.cursor)
        self.advance()

    def advance(self) -> bool:
        """Move the cursor forward; return True when it wrapped to the start."""
        if not self.entries:
            raise SessionStateError("Cannot advance an empty session")
        self.state = SessionState.REVIEWING
        self.cursor = (self.cursor + 1) % len(self.entries)
        if self.cursor != 0:
            return False
        self.state = SessionState.AWAITING_EXPORT
        self.cycles_completed += 1
        self._audit("cycle_complete", cycles=self.cycles_completed, marked=len(self._marked))
        if self.on_cycle_complete is not None:
            self.on_cycle_complete(self)
        return True

    def undo(self) -> bool:
        """Revert the last decision. Returns False (and changes nothing) if there is none."""
        if not self.entries or self._last is None:
            LOGGER.info("Nothing to undo: only the last decision can be reverted")
            return False
        decision = self._last
        self._last = None
        self.cursor = (self.cursor - 1 + len(self.entries)) % len(self.entries)
        if decision.kind == "mark" and decision.added:
            self._marked.pop(decision.path, None)
        self.state = SessionState.REVIEWING
        self._audit("undo", kind=decision.kind, path=decision.path, cursor=self.cursor)
        return True

    def resume(self) -> None:
        """Leave the export gate and keep reviewing from the first entry."""
        if self.state is SessionState.AWAITING_EXPORT:
            self.state = SessionState.REVIEWING
            self._audit("resume", cursor=self.cursor)

    def build_manifest(self, now: Optional[datetime] = None) -> RemovalManifest:
        if self.folder is None:
            raise SessionStateError("No folder loaded; nothing to export")
        now = now or datetime.now(timezone.utc)
        return RemovalManifest(
            folder=self.folder,
            timestamp=now.isoformat(),
            removed_files=self.marked,
            total_files=len(self.entries),
        )

    def export_manifest(self, writer: Callable[[RemovalManifest], object]):
        """Build the manifest, persist it through ``writer`` and reset the session.

        Returns whatever the writer returns (usually the written path). If the
        writer raises, the session is left untouched.
        """
        manifest = self.build_manifest()
        result = writer(manifest)
        self._audit("export", removed=manifest.removed_count, total=manifest.total_files)
        self._reset()
        return result

    def discard(self) -> None:
        self._audit("discard", marked=len(self._marked))
        self._reset()

    # --- helpers ---------------------------------------------------------

    def _require_entry(self, action: str) -> MediaEntry:
        entry = self.current
        if entry is None:
            raise SessionStateError(f"Cannot {action}: no entries loaded")
        return entry

    def _reset(self) -> None:
        self.entries = []
        self.folder = None
        self.cursor = 0
        self._marked.clear()
        self._last = None
        self.state = SessionState.EMPTY

    def _audit(self, action: str, **details) -> None:
        if self.debug_log is not None:
            self.debug_log.log_user_action(action, **details)
