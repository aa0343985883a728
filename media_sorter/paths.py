"""Path clean-up and existence checks for deletion jobs."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from urllib.parse import unquote

LOGGER = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_FILE_SCHEME = re.compile(r"^file://", re.IGNORECASE)
_DRIVE_AFTER_SLASH = re.compile(r"^/[A-Za-z]:/")
_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(raw: str) -> str:
    """Return the canonical comparison form of a manifest path.

    Symlinks and ``..`` segments are left alone.
    """
    path = _CONTROL_CHARS.sub("", raw)
    if _FILE_SCHEME.match(path):
        path = _FILE_SCHEME.sub("", path, count=1)
        # file:///C:/x -> C:/x
        if _DRIVE_AFTER_SLASH.match(path):
            path = path[1:]
    path = path.replace("\\", "/")
    path = _REPEATED_SLASHES.sub("/", path)
    try:
        path = unquote(path, errors="strict")
    except UnicodeDecodeError:
        LOGGER.debug("Keeping undecoded path %r", path)
    return path


def candidate_forms(path: str) -> List[str]:
    """The three forms a path is checked in: as given, absolute, OS separators."""
    return [path, os.path.abspath(path), path.replace("/", os.sep)]


def locate(path: str) -> Optional[str]:
    """Return the first candidate form that exists, or None."""
    for candidate in candidate_forms(path):
        try:
            if os.path.exists(candidate):
                return candidate
        except (OSError, ValueError):
            continue
    return None


@dataclass
class VerifiedPath:
    raw: str
    normalized: str
    target: Optional[str]

    @property
    def present(self) -> bool:
        return self.target is not None


def verify_paths(raw_paths: Sequence[str]) -> Tuple[List[VerifiedPath], List[str]]:
    """Normalise and check every path.

    Returns all verified records (input order) and the normalised forms that
    could not be found in any of the three ways.
    """
    verified: List[VerifiedPath] = []
    missing: List[str] = []
    for raw in raw_paths:
        normalized = normalize_path(raw)
        record = VerifiedPath(raw=raw, normalized=normalized, target=locate(normalized))
        verified.append(record)
        if not record.present:
            missing.append(normalized)
    if missing:
        LOGGER.warning("%d of %d path(s) missing", len(missing), len(verified))
    return verified, missing
