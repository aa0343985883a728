"""Review folders of media files and delete the rejected ones in a later job."""

from .audit import DebugLog
from .config import AppConfig, config_from_mapping, load_yaml_config
from .errors import (
    ConfigurationError,
    EmptyJobError,
    ManifestValidationError,
    MediaSorterError,
    MissingFilesError,
    SessionStateError,
)
from .jobs import JobRunner
from .listing import list_media
from .manifest import parse_manifest, read_manifest, write_manifest
from .models import DebugLogEntry, DeletionResult, JobReport, MediaEntry, RemovalManifest
from .paths import normalize_path, verify_paths
from .session import ReviewSession, SessionState
from .trash import StrategyFailed, TrashSuccess, build_strategies

__version__ = "1.0.0"

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "DebugLog",
    "DebugLogEntry",
    "DeletionResult",
    "EmptyJobError",
    "JobReport",
    "JobRunner",
    "ManifestValidationError",
    "MediaEntry",
    "MediaSorterError",
    "MissingFilesError",
    "RemovalManifest",
    "ReviewSession",
    "SessionState",
    "SessionStateError",
    "StrategyFailed",
    "TrashSuccess",
    "build_strategies",
    "config_from_mapping",
    "list_media",
    "load_yaml_config",
    "normalize_path",
    "parse_manifest",
    "read_manifest",
    "verify_paths",
    "write_manifest",
]
