"""Error types raised by the review session and the job runner."""
from __future__ import annotations

from typing import List, Sequence


class MediaSorterError(Exception):
    """Base class for every error this package raises on purpose."""


class ConfigurationError(MediaSorterError):
    """Invalid configuration or a missing collaborator at construction time."""


class SessionStateError(MediaSorterError):
    """A review decision was requested in a state that cannot accept it."""


class ManifestValidationError(MediaSorterError):
    """The manifest is not valid JSON or does not have the expected shape."""


class EmptyJobError(MediaSorterError):
    """The manifest is valid but lists no files."""

    def __init__(self, message: str = "Manifest lists no files to delete") -> None:
        super().__init__(message)


class MissingFilesError(MediaSorterError):
    """One or more files in a job could not be found; nothing was deleted."""

    def __init__(self, missing: Sequence[str], sample_size: int = 5) -> None:
        self.missing: List[str] = list(missing)
        self.sample: List[str] = self.missing[: max(sample_size, 0)]
        super().__init__(f"{len(self.missing)} file(s) not found; job aborted")

    def describe(self) -> str:
        lines = [str(self)]
        lines.extend(f"  - {path}" for path in self.sample)
        remaining = len(self.missing) - len(self.sample)
        if remaining > 0:
            lines.append(f"  ... and {remaining} more")
        return "\n".join(lines)
