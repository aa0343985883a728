"""Trash strategies used by the job runner.

Each strategy tries one mechanism and reports the outcome as a value instead
of raising, so the runner can walk the list and stop at the first success:

    native         send2trash's default backend
    legacy         send2trash's older per-platform backend
    secure_delete  shred / rm -P / sdelete
    trash_command  gio trash / trash / PowerShell recycle bin
"""
from __future__ import annotations

import importlib
import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Union

from send2trash import send2trash

from .errors import ConfigurationError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class TrashSuccess:
    strategy: str


@dataclass(frozen=True)
class StrategyFailed:
    strategy: str
    reason: str


TrashOutcome = Union[TrashSuccess, StrategyFailed]


class BaseTrashStrategy:
    """One way of removing a single file."""

    name = "base"

    def attempt(self, path: str) -> TrashOutcome:
        try:
            self._remove(path)
        except Exception as exc:  # noqa: BLE001 - every failure becomes a StrategyFailed
            reason = str(exc) or exc.__class__.__name__
            LOGGER.debug("%s failed for %s: %s", self.name, path, reason)
            return StrategyFailed(self.name, reason)
        return TrashSuccess(self.name)

    def _remove(self, path: str) -> None:
        raise NotImplementedError


class NativeTrashStrategy(BaseTrashStrategy):
    name = "native"

    def _remove(self, path: str) -> None:
        send2trash(path)


_LEGACY_MODULES = {
    "win32": "send2trash.win.legacy",
    "darwin": "send2trash.mac.legacy",
}


class LegacyTrashStrategy(BaseTrashStrategy):
    """send2trash's pre-modern backend for the current platform."""

    name = "legacy"

    def __init__(self, platform: Optional[str] = None):
        self.platform = platform or sys.platform

    @property
    def module_name(self) -> str:
        return _LEGACY_MODULES.get(self.platform, "send2trash.plat_other")

    def _remove(self, path: str) -> None:
        module = importlib.import_module(self.module_name)
        module.send2trash(path)


class CommandStrategy(BaseTrashStrategy):
    """Runs a per-platform shell command with the path as the last argument."""

    commands: Dict[str, List[str]] = {}

    def __init__(self, platform: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT):
        self.platform = platform or sys.platform
        self.timeout = timeout

    def build_command(self, path: str) -> List[str]:
        key = "linux" if self.platform.startswith("linux") else self.platform
        if key not in self.commands:
            raise RuntimeError(f"{self.name} is not supported on {self.platform}")
        return [*self.commands[key], path]

    def _remove(self, path: str) -> None:
        command = self.build_command(path)
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise RuntimeError(f"{command[0]} is not available") from exc
        except subprocess.TimeoutExpired as exc:
            raise RuntimeError(f"{command[0]} timed out after {self.timeout:g}s") from exc
        if completed.returncode != 0:
            message = f"{command[0]} exited with {completed.returncode}"
            detail = (completed.stderr or completed.stdout or "").strip()
            if detail:
                message = f"{message}: {detail}"
            raise RuntimeError(message)


class SecureDeleteStrategy(CommandStrategy):
    name = "secure_delete"
    commands = {
        "linux": ["shred", "--remove", "--zero"],
        "darwin": ["rm", "-P"],
        "win32": ["sdelete", "-q", "-nobanner"],
    }


class TrashCommandStrategy(CommandStrategy):
    name = "trash_command"
    commands = {
        "linux": ["gio", "trash"],
        "darwin": ["trash"],
    }

    def build_command(self, path: str) -> List[str]:
        if self.platform == "win32":
            escaped = path.replace("'", "''")
            script = (
                "Add-Type -AssemblyName Microsoft.VisualBasic; "
                "[Microsoft.VisualBasic.FileIO.FileSystem]::DeleteFile("
                f"'{escaped}', 'OnlyErrorDialogs', 'SendToRecycleBin')"
            )
            return ["powershell", "-NoProfile", "-NonInteractive", "-Command", script]
        return super().build_command(path)


STRATEGIES: Dict[str, Callable[..., BaseTrashStrategy]] = {
    "native": lambda **_: NativeTrashStrategy(),
    "legacy": lambda platform=None, **_: LegacyTrashStrategy(platform=platform),
    "secure_delete": lambda platform=None, timeout=DEFAULT_TIMEOUT: SecureDeleteStrategy(platform, timeout),
    "trash_command": lambda platform=None, timeout=DEFAULT_TIMEOUT: TrashCommandStrategy(platform, timeout),
}


def build_strategies(
    names: Sequence[str],
    platform: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> List[BaseTrashStrategy]:
    """Instantiate strategies in the given order."""
    if not names:
        raise ConfigurationError("At least one trash strategy is required")
    strategies: List[BaseTrashStrategy] = []
    for name in names:
        factory = STRATEGIES.get(name)
        if factory is None:
            raise ConfigurationError(f"Unknown trash strategy: {name!r}")
        strategies.append(factory(platform=platform, timeout=timeout))
    return strategies
