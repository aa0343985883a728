"""Reading and writing removal manifests."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import EmptyJobError, ManifestValidationError
from .models import RemovalManifest

LOGGER = logging.getLogger(__name__)


def manifest_filename(folder: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    name = Path(folder.replace("\\", "/").rstrip("/")).name or "folder"
    safe = "".join(c if c.isalnum() or c in {"-", "_", "."} else "_" for c in name)
    return f"{safe}_{now.strftime('%Y-%m-%dT%H-%M-%S')}.json"


def write_manifest(manifest: RemovalManifest, output_dir: Path, now: Optional[datetime] = None) -> Path:
    """Write ``manifest`` as pretty JSON into ``output_dir`` and return the path."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / manifest_filename(manifest.folder, now)
    stem = path.stem
    counter = 1
    while path.exists():
        path = output_dir / f"{stem}_{counter}.json"
        counter += 1
    path.write_text(json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    LOGGER.info("Manifest with %d file(s) written to %s", manifest.removed_count, path)
    return path


def _validate(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ManifestValidationError("Manifest must be a JSON object")
    if "removedFiles" not in data:
        raise ManifestValidationError("Manifest has no 'removedFiles' list")
    removed = data["removedFiles"]
    if not isinstance(removed, list):
        raise ManifestValidationError("'removedFiles' must be a list")
    bad = [index for index, item in enumerate(removed) if not isinstance(item, str)]
    if bad:
        raise ManifestValidationError(f"'removedFiles' entries must be strings (bad index {bad[0]})")
    count = data.get("removedCount")
    if count is not None and count != len(removed):
        raise ManifestValidationError(
            f"'removedCount' is {count} but 'removedFiles' lists {len(removed)} file(s)"
        )
    return data


def parse_manifest(text: Union[str, bytes]) -> RemovalManifest:
    """Parse and validate manifest JSON.

    Raises ManifestValidationError for a malformed manifest and EmptyJobError
    when ``removedFiles`` is empty.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ManifestValidationError(f"Manifest is not UTF-8 text: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestValidationError(f"Manifest is not valid JSON: {exc}") from exc
    data = _validate(data)
    if not data["removedFiles"]:
        raise EmptyJobError()
    total = data.get("totalFiles", 0)
    return RemovalManifest(
        folder=str(data.get("folder", "")),
        timestamp=str(data.get("timestamp", "")),
        removed_files=list(data["removedFiles"]),
        total_files=total if isinstance(total, int) else 0,
    )


def read_manifest(path: Path) -> RemovalManifest:
    return parse_manifest(Path(path).read_bytes())
