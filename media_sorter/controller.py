"""UI controller: the single owner of the review session.

Keys and menu commands arrive here from the viewer. Every operation runs to
completion before the next key is accepted; while a dialog or a job is open
the controller is busy and key presses are dropped.
"""
from __future__ import annotations

import functools
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .audit import DebugLog
from .config import MENU_KEYS, AppConfig
from .errors import EmptyJobError, ManifestValidationError, MediaSorterError, MissingFilesError
from .jobs import JobRunner
from .listing import list_media
from .manifest import write_manifest
from .models import DeletionResult, JobReport, MediaEntry
from .session import ReviewSession, SessionState

LOGGER = logging.getLogger(__name__)

# X11 reports a held key as release/press pairs with no gap
REPEAT_WINDOW = 0.03

ABOUT = {
    "app_name": "Media Sorter",
    "author": "TUAN, Nguyen Duc",
    "description": "Quickly review and sort media files with keyboard shortcuts.",
    "website": "https://github.com/m4tice/media-sorter",
    "license": "MIT License",
}


def _guarded(action: str):
    """Run a controller operation, turning any failure into an error dialog."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except MediaSorterError as exc:
                LOGGER.error("%s failed: %s", action, exc)
                self._modal(self.dialogs.error, f"{action} failed:\n{exc}")
            except Exception as exc:  # noqa: BLE001 - top-level boundary for one user action
                LOGGER.exception("Unexpected error during %s", action)
                self._modal(self.dialogs.error, f"Unexpected error during {action}:\n{exc}")
            finally:
                self.refresh()
            return None

        return wrapper

    return decorator


class ReviewController:
    def __init__(
        self,
        config: AppConfig,
        job_runner: JobRunner,
        dialogs,
        lister: Callable[..., List[MediaEntry]] = list_media,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config
        self.job_runner = job_runner
        self.dialogs = dialogs
        self.lister = lister
        self.view = None
        self.debug_log: Optional[DebugLog] = None
        self.session = ReviewSession(on_cycle_complete=self._on_cycle_complete)
        self.status = "Press 'o' to open a folder"
        self.running = True
        self._busy = False
        self._held: set = set()
        self._released_at: Dict[str, float] = {}
        self._clock = clock
        self._review_keys: Dict[str, str] = {}
        for action, keys in config.key_bindings.items():
            for key in keys:
                self._review_keys[key.lower()] = action
        if config.debug:
            self._enable_debug()

    # --- plumbing --------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self._busy

    def attach_view(self, view) -> None:
        self.view = view
        self.refresh()

    def refresh(self) -> None:
        if self.view is not None:
            self.view.render(self)

    def _enable_debug(self) -> None:
        self.debug_log = DebugLog(self.config.app_name, capacity=self.config.debug_log_capacity)
        self.session.debug_log = self.debug_log
        self.job_runner.debug_log = self.debug_log

    def _disable_debug(self) -> None:
        self.session.debug_log = None
        self.job_runner.debug_log = None
        self.debug_log = None

    def _flush_debug(self, action: str) -> Optional[Path]:
        if self.debug_log is None or not len(self.debug_log):
            return None
        path = self.debug_log.flush(action, self.config.output_dir)
        self.debug_log.clear()
        return path

    # --- key handling ----------------------------------------------------

    def key_pressed(self, key: Optional[str]) -> bool:
        """Dispatch one key press. Held keys fire once until released."""
        key = (key or "").lower()
        if not key or key in self._held:
            return False
        self._held.add(key)
        released = self._released_at.pop(key, None)
        if released is not None and self._clock() - released < REPEAT_WINDOW:
            LOGGER.debug("Auto-repeat of %s ignored", key)
            return False
        if self._busy:
            LOGGER.debug("Busy, ignoring key %s", key)
            return False
        action = self._review_keys.get(key)
        if action is not None:
            self.review_action(action)
            return True
        command = MENU_KEYS.get(key)
        if command is not None:
            getattr(self, command)()
            return True
        return False

    def key_released(self, key: Optional[str]) -> None:
        key = (key or "").lower()
        if key in self._held:
            self._held.discard(key)
            self._released_at[key] = self._clock()

    def _modal(self, show: Callable, *args):
        """Show a blocking dialog. Key releases go to the dialog, so held keys reset."""
        try:
            return show(*args)
        finally:
            self._held.clear()
            self._released_at.clear()

    @_guarded("review")
    def review_action(self, action: str) -> None:
        if self.session.state is SessionState.EMPTY:
            self.status = "No media loaded"
            return
        self._busy = True
        try:
            if action == "remove":
                self.session.mark()
            elif action == "keep":
                self.session.keep()
            elif action == "back":
                if not self.session.undo():
                    self.status = "Nothing to undo"
            else:
                LOGGER.warning("Unknown review action %s", action)
        finally:
            self._busy = False

    # --- export gate -----------------------------------------------------

    def _on_cycle_complete(self, session: ReviewSession) -> None:
        self._busy = True
        try:
            choice = self._modal(self.dialogs.ask_export, len(session.marked), len(session))
        finally:
            self._busy = False
        if choice is None:
            session.resume()
            self.status = "Reviewing again from the first file"
        elif choice:
            self.export()
        else:
            session.discard()
            self.status = "Marks discarded"

    def export(self) -> Optional[Path]:
        try:
            path = self.session.export_manifest(lambda manifest: write_manifest(manifest, self.config.output_dir))
        except OSError as exc:
            LOGGER.error("Could not write manifest: %s", exc)
            self._modal(self.dialogs.error, f"Could not write manifest:\n{exc}")
            return None
        log_path = self._flush_debug("export")
        self.status = f"Manifest saved: {path.name}"
        message = f"Manifest saved to:\n{path}"
        if log_path is not None:
            message += f"\n\nDebug log: {log_path}"
        self._modal(self.dialogs.info, message)
        return path

    # --- menu ------------------------------------------------------------

    @_guarded("Open Folder")
    def open_folder(self, folder: Optional[Path] = None) -> None:
        self._busy = True
        try:
            if folder is None:
                folder = self._modal(self.dialogs.pick_folder)
            if folder is None:
                LOGGER.info("Folder selection cancelled")
                return
            entries = self.lister(folder, self.config.extensions)
        finally:
            self._busy = False
        self.session.load_entries(entries, folder=str(Path(folder).absolute()))
        self.status = f"{len(entries)} media file(s)" if entries else "No media files found"

    @_guarded("Run Job")
    def run_job(self, manifest_path: Optional[Path] = None) -> Optional[JobReport]:
        self._busy = True
        try:
            if manifest_path is None:
                manifest_path = self._modal(self.dialogs.pick_manifest, self.config.output_dir)
            if manifest_path is None:
                LOGGER.info("Job cancelled")
                return None
            try:
                report = self.job_runner.run_manifest_file(manifest_path, progress=self._job_progress)
            except ManifestValidationError as exc:
                self._modal(self.dialogs.error, f"Invalid manifest:\n{exc}")
                return None
            except EmptyJobError:
                self._modal(self.dialogs.info, "Nothing to do: the manifest lists no files.")
                return None
            except MissingFilesError as exc:
                self._modal(self.dialogs.warning, f"{exc.describe()}\n\nNo files were deleted.")
                return None
            finally:
                self._flush_debug("job")
        finally:
            self._busy = False
        self.status = f"Job: {report.summary()}"
        self._show_report(report)
        return report

    def _job_progress(self, done: int, total: int, result: DeletionResult) -> None:
        self.status = f"Deleting {done}/{total}"
        self.refresh()

    def _show_report(self, report: JobReport) -> None:
        if not report.failed:
            self._modal(self.dialogs.info, f"Job complete: {report.summary()}")
            return
        lines = [f"Job complete: {report.summary()}", ""]
        for result in report.failed[: self.config.missing_sample_size or len(report.failed)]:
            lines.append(f"- {result.path}: {result.error}")
        self._modal(self.dialogs.warning, "\n".join(lines))

    @_guarded("Toggle Debug")
    def toggle_debug(self) -> None:
        if self.debug_log is None:
            self._enable_debug()
            self.status = "Debug logging on"
        else:
            self._flush_debug("session_end")
            self._disable_debug()
            self.status = "Debug logging off"

    def about(self) -> None:
        self._modal(
            self.dialogs.info,
            f"{ABOUT['app_name']} - version {self.config.version}\n"
            f"Author: {ABOUT['author']}\n\n"
            f"{ABOUT['description']}\n\n"
            f"Website: {ABOUT['website']}\n"
            f"License: {ABOUT['license']}",
        )

    @_guarded("Quit")
    def quit(self) -> None:
        self.running = False
        try:
            self._flush_debug("session_end")
        finally:
            if self.view is not None:
                self.view.close()
            self.dialogs.close()
