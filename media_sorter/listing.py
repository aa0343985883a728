"""Folder listing for the review session."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List

from .models import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS, MediaEntry

LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTS = set(IMAGE_EXTENSIONS) | set(VIDEO_EXTENSIONS)


def list_media(folder: Path, extensions: Iterable[str] = SUPPORTED_EXTS) -> List[MediaEntry]:
    """Return the media files directly inside ``folder``.

    Order is whatever the filesystem reports; entries are not sorted.
    Directories and files with other extensions are skipped.
    """
    allowed = {ext.lower() for ext in extensions}
    folder = Path(folder).absolute()
    entries: List[MediaEntry] = []
    with os.scandir(folder) as it:
        for item in it:
            try:
                if not item.is_file():
                    continue
            except OSError as exc:
                LOGGER.warning("Skipping unreadable entry %s: %s", item.path, exc)
                continue
            if Path(item.name).suffix.lower() in allowed:
                entries.append(MediaEntry.from_path(Path(item.path)))
    LOGGER.info("Found %d media files in %s", len(entries), folder)
    return entries
