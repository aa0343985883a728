"""Application configuration: YAML file first, command-line flags on top."""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .errors import ConfigurationError
from .models import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS

LOGGER = logging.getLogger(__name__)

DEFAULT_STRATEGIES = ["native", "legacy", "secure_delete", "trash_command"]
DEFAULT_KEY_BINDINGS = {
    "remove": ["1", "j"],
    "back": ["k"],
    "keep": ["l"],
}
# Fixed menu shortcuts; review key bindings may not reuse them.
MENU_KEYS = {
    "o": "open_folder",
    "r": "run_job",
    "d": "toggle_debug",
    "a": "about",
    "q": "quit",
}


def _default_downloads_dir() -> Path:
    return Path.home() / "Downloads"


@dataclass
class AppConfig:
    app_name: str = "media_sorter"
    version: str = "1.0.0"
    downloads_dir: Path = field(default_factory=_default_downloads_dir)
    app_subfolder: str = "MediaSorter"
    image_extensions: List[str] = field(default_factory=lambda: list(IMAGE_EXTENSIONS))
    video_extensions: List[str] = field(default_factory=lambda: list(VIDEO_EXTENSIONS))
    debug: bool = False
    debug_log_capacity: int = 500
    missing_sample_size: int = 5
    trash_strategies: List[str] = field(default_factory=lambda: list(DEFAULT_STRATEGIES))
    command_timeout: float = 30.0
    key_bindings: Dict[str, List[str]] = field(
        default_factory=lambda: {action: list(keys) for action, keys in DEFAULT_KEY_BINDINGS.items()}
    )
    verbose: bool = False

    @property
    def output_dir(self) -> Path:
        """Where manifests and debug logs are written."""
        return self.downloads_dir / self.app_subfolder

    @property
    def extensions(self) -> List[str]:
        return self.image_extensions + self.video_extensions

    def validate(self) -> None:
        if self.debug_log_capacity < 1:
            raise ConfigurationError("debug_log_capacity must be at least 1")
        if self.missing_sample_size < 0:
            raise ConfigurationError("missing_sample_size must not be negative")
        if self.command_timeout <= 0:
            raise ConfigurationError("command_timeout must be positive")
        if not self.trash_strategies:
            raise ConfigurationError("at least one trash strategy is required")
        if not self.app_subfolder.strip():
            raise ConfigurationError("app_subfolder must not be empty")
        missing = set(DEFAULT_KEY_BINDINGS) - set(self.key_bindings)
        if missing:
            raise ConfigurationError(f"key_bindings missing actions: {sorted(missing)}")
        unknown = set(self.key_bindings) - set(DEFAULT_KEY_BINDINGS)
        if unknown:
            raise ConfigurationError(f"key_bindings has unknown actions: {sorted(unknown)}")
        seen: Dict[str, str] = {}
        for action, keys in self.key_bindings.items():
            for key in keys:
                if key in MENU_KEYS:
                    raise ConfigurationError(f"key {key!r} for {action} is reserved for {MENU_KEYS[key]}")
                if key in seen and seen[key] != action:
                    raise ConfigurationError(f"key {key!r} bound to both {seen[key]} and {action}")
                seen[key] = action


def _normalise_extensions(values) -> List[str]:
    if not isinstance(values, list):
        raise ConfigurationError("extension lists must be YAML sequences")
    result = []
    for value in values:
        ext = str(value).strip().lower()
        if not ext:
            continue
        result.append(ext if ext.startswith(".") else f".{ext}")
    return result


def load_yaml_config(path: Optional[Path]) -> Dict:
    if path is None or not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Could not parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data


def config_from_mapping(data: Dict) -> AppConfig:
    cfg = AppConfig()
    try:
        if "app_name" in data:
            cfg.app_name = str(data["app_name"])
        if data.get("downloads_dir"):
            cfg.downloads_dir = Path(data["downloads_dir"]).expanduser()
        if "app_subfolder" in data:
            cfg.app_subfolder = str(data["app_subfolder"])
        if "image_extensions" in data:
            cfg.image_extensions = _normalise_extensions(data["image_extensions"])
        if "video_extensions" in data:
            cfg.video_extensions = _normalise_extensions(data["video_extensions"])
        if "debug" in data:
            if not isinstance(data["debug"], bool):
                raise ConfigurationError(f"debug must be true or false, got {data['debug']!r}")
            cfg.debug = data["debug"]
        cfg.debug_log_capacity = int(data.get("debug_log_capacity", cfg.debug_log_capacity))
        cfg.missing_sample_size = int(data.get("missing_sample_size", cfg.missing_sample_size))
        cfg.command_timeout = float(data.get("command_timeout", cfg.command_timeout))
        if "trash_strategies" in data:
            cfg.trash_strategies = [str(name) for name in data["trash_strategies"] or []]
        if "key_bindings" in data:
            bindings = data["key_bindings"] or {}
            for action, keys in bindings.items():
                if isinstance(keys, str):
                    keys = [keys]
                cfg.key_bindings[str(action)] = [str(key).lower() for key in keys]
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration value: {exc}") from exc
    cfg.validate()
    return cfg


def config_from_args(args: argparse.Namespace) -> AppConfig:
    cfg = config_from_mapping(load_yaml_config(getattr(args, "config", None)))
    if getattr(args, "debug", False):
        cfg.debug = True
    if getattr(args, "downloads_dir", None):
        cfg.downloads_dir = Path(args.downloads_dir).expanduser()
    if getattr(args, "verbose", False):
        cfg.verbose = True
    LOGGER.debug("Output directory: %s", cfg.output_dir)
    return cfg
