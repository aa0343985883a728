"""Data records shared by the review session, manifest I/O and the job runner."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp", ".svg")
VIDEO_EXTENSIONS = (".mp4", ".mov", ".m4v", ".avi", ".mkv", ".webm")


@dataclass(frozen=True)
class MediaEntry:
    """One discovered media file. Identity is the absolute path."""

    name: str
    path: str
    extension: str

    @classmethod
    def from_path(cls, path: Path) -> "MediaEntry":
        absolute = path.absolute()
        return cls(name=absolute.name, path=str(absolute), extension=absolute.suffix.lower())

    @property
    def is_image(self) -> bool:
        return self.extension in IMAGE_EXTENSIONS

    @property
    def is_video(self) -> bool:
        return self.extension in VIDEO_EXTENSIONS


@dataclass
class RemovalManifest:
    """Persisted record of the files marked during one review session."""

    folder: str
    timestamp: str
    removed_files: List[str] = field(default_factory=list)
    total_files: int = 0

    @property
    def removed_count(self) -> int:
        return len(self.removed_files)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folder": self.folder,
            "timestamp": self.timestamp,
            "removedFiles": list(self.removed_files),
            "totalFiles": self.total_files,
            "removedCount": self.removed_count,
        }


@dataclass
class DeletionResult:
    path: str
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "success": self.success, "error": self.error}


@dataclass
class DebugLogEntry:
    timestamp: str
    action: str
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class JobReport:
    """Outcome of one deletion job, one result per input path in input order."""

    results: List[DeletionResult]
    source: Optional[str] = None

    @property
    def succeeded(self) -> List[DeletionResult]:
        return [result for result in self.results if result.success]

    @property
    def failed(self) -> List[DeletionResult]:
        return [result for result in self.results if not result.success]

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def summary(self) -> str:
        return f"{self.success_count} succeeded, {self.failed_count} failed"
