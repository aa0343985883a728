"""Controller tests with scripted dialogs in place of tkinter."""
from __future__ import annotations

import functools
import itertools
import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from media_sorter.config import AppConfig
from media_sorter.controller import ReviewController
from media_sorter.jobs import JobRunner
from media_sorter.session import SessionState
from media_sorter.trash import BaseTrashStrategy, StrategyFailed, TrashSuccess


class FakeDialogs:
    def __init__(self, folder=None, manifest=None, export_choice=True):
        self.folder = folder
        self.manifest = manifest
        self.export_choice = export_choice
        self.messages = []
        self.closed = False

    def pick_folder(self):
        return self.folder

    def pick_manifest(self, initial_dir=None):
        return self.manifest

    def ask_export(self, marked, total):
        self.messages.append(("ask", f"{marked}/{total}"))
        return self.export_choice

    def info(self, message):
        self.messages.append(("info", message))

    def warning(self, message):
        self.messages.append(("warning", message))

    def error(self, message):
        self.messages.append(("error", message))

    def close(self):
        self.closed = True


class FakeView:
    def __init__(self):
        self.renders = 0
        self.closed = False

    def render(self, controller):
        self.renders += 1

    def close(self):
        self.closed = True


class UnlinkStrategy(BaseTrashStrategy):
    name = "unlink"

    def attempt(self, path):
        if "locked" in path:
            return StrategyFailed(self.name, "file is locked")
        Path(path).unlink()
        return TrashSuccess(self.name)


class SteppedClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def media_dir(tmp_path):
    folder = tmp_path / "holiday"
    folder.mkdir()
    for name in ["a.jpg", "b.mp4", "c.png"]:
        (folder / name).write_bytes(b"x")
    return folder


def _controller(tmp_path, dialogs, debug=False, clock=None):
    config = AppConfig(downloads_dir=tmp_path / "Downloads", debug=debug)
    if clock is None:
        # one second per reading: deliberate key presses, never auto-repeat
        clock = functools.partial(next, itertools.count())
    controller = ReviewController(config, JobRunner([UnlinkStrategy()]), dialogs, clock=clock)
    controller.attach_view(FakeView())
    return controller


def _press(controller, key):
    controller.key_pressed(key)
    controller.key_released(key)


def test_open_folder_and_review_to_export(tmp_path, media_dir):
    dialogs = FakeDialogs(folder=media_dir, export_choice=True)
    controller = _controller(tmp_path, dialogs)
    controller.key_pressed("o")
    assert len(controller.session) == 3
    first = controller.session.current.path

    _press(controller, "j")
    _press(controller, "l")
    _press(controller, "l")

    assert ("ask", "1/3") in dialogs.messages
    assert controller.session.state is SessionState.EMPTY
    manifests = list((tmp_path / "Downloads" / "MediaSorter").glob("holiday_*.json"))
    assert len(manifests) == 1
    data = json.loads(manifests[0].read_text())
    assert data["removedFiles"] == [first]
    assert data["totalFiles"] == 3


def test_held_key_does_not_repeat(tmp_path, media_dir):
    controller = _controller(tmp_path, FakeDialogs(folder=media_dir))
    controller.open_folder()
    controller.key_pressed("l")
    controller.key_pressed("l")
    assert controller.session.cursor == 1
    controller.key_released("l")
    controller.key_pressed("l")
    assert controller.session.cursor == 2


def test_back_key_undoes_last_decision(tmp_path, media_dir):
    controller = _controller(tmp_path, FakeDialogs(folder=media_dir))
    controller.open_folder()
    _press(controller, "1")
    _press(controller, "k")
    assert controller.session.cursor == 0
    assert controller.session.marked == []
    _press(controller, "k")
    assert controller.status == "Nothing to undo"


def test_cancel_at_gate_keeps_reviewing(tmp_path, media_dir):
    dialogs = FakeDialogs(folder=media_dir, export_choice=None)
    controller = _controller(tmp_path, dialogs)
    controller.open_folder()
    for _ in range(6):
        _press(controller, "l")
    assert [m for m in dialogs.messages if m[0] == "ask"] == [("ask", "0/3"), ("ask", "0/3")]
    assert controller.session.state is SessionState.REVIEWING


def test_discard_at_gate(tmp_path, media_dir):
    controller = _controller(tmp_path, FakeDialogs(folder=media_dir, export_choice=False))
    controller.open_folder()
    for key in ["j", "j", "j"]:
        _press(controller, key)
    assert controller.session.state is SessionState.EMPTY
    assert not (tmp_path / "Downloads" / "MediaSorter").exists()


def test_run_job_reports_summary(tmp_path, media_dir):
    locked = media_dir / "locked.jpg"
    locked.write_bytes(b"x")
    manifest = tmp_path / "job.json"
    manifest.write_text(json.dumps({"removedFiles": [str(media_dir / "a.jpg"), str(locked)]}))
    dialogs = FakeDialogs(manifest=manifest)
    controller = _controller(tmp_path, dialogs)

    report = controller.run_job()

    assert report.summary() == "1 succeeded, 1 failed"
    kind, message = dialogs.messages[-1]
    assert kind == "warning"
    assert "1 succeeded, 1 failed" in message
    assert "file is locked" in message


def test_run_job_with_missing_file_deletes_nothing(tmp_path, media_dir):
    manifest = tmp_path / "job.json"
    manifest.write_text(json.dumps({"removedFiles": [str(media_dir / "a.jpg"), "/x/missing.jpg"]}))
    dialogs = FakeDialogs(manifest=manifest)
    controller = _controller(tmp_path, dialogs)

    assert controller.run_job() is None
    assert (media_dir / "a.jpg").exists()
    kind, message = dialogs.messages[-1]
    assert kind == "warning"
    assert "/x/missing.jpg" in message


@pytest.mark.parametrize(
    "payload, kind, text",
    [
        ({"removedFiles": []}, "info", "Nothing to do"),
        ({"files": []}, "error", "Invalid manifest"),
    ],
)
def test_run_job_empty_and_invalid(tmp_path, payload, kind, text):
    manifest = tmp_path / "job.json"
    manifest.write_text(json.dumps(payload))
    dialogs = FakeDialogs(manifest=manifest)
    controller = _controller(tmp_path, dialogs)
    controller.run_job()
    assert dialogs.messages[-1][0] == kind
    assert text in dialogs.messages[-1][1]


def test_unexpected_error_is_shown_not_raised(tmp_path):
    dialogs = FakeDialogs(folder=tmp_path / "does_not_exist")
    controller = _controller(tmp_path, dialogs)
    controller.open_folder()
    assert dialogs.messages[-1][0] == "error"
    assert controller.session.state is SessionState.EMPTY


def test_cancelled_pickers_are_noops(tmp_path):
    dialogs = FakeDialogs()
    controller = _controller(tmp_path, dialogs)
    controller.open_folder()
    assert controller.run_job() is None
    assert dialogs.messages == []


def test_toggle_debug_flushes_log_on_quit(tmp_path, media_dir):
    controller = _controller(tmp_path, FakeDialogs(folder=media_dir))
    controller.key_pressed("d")
    assert controller.debug_log is not None
    controller.open_folder()
    _press(controller, "l")
    controller.quit()
    logs = list((tmp_path / "Downloads" / "MediaSorter").glob("media_sorter_log_session_end_*.txt"))
    assert len(logs) == 1
    assert "user:keep" in logs[0].read_text()
    assert controller.view.closed and controller.dialogs.closed
    assert controller.running is False


def test_about(tmp_path):
    dialogs = FakeDialogs()
    controller = _controller(tmp_path, dialogs)
    controller.key_pressed("a")
    kind, message = dialogs.messages[-1]
    assert kind == "info"
    assert "Media Sorter - version 1.0.0" in message
    assert "Author: TUAN, Nguyen Duc" in message
    assert "https://github.com/m4tice/media-sorter" in message
    assert "MIT License" in message


def test_key_fires_after_dialog_swallowed_its_release(tmp_path, media_dir):
    dialogs = FakeDialogs(folder=media_dir, export_choice=None)
    controller = _controller(tmp_path, dialogs)
    controller.open_folder()
    _press(controller, "l")
    _press(controller, "l")
    # this press wraps and opens the export question; its release never arrives
    controller.key_pressed("l")
    assert ("ask", "0/3") in dialogs.messages
    assert controller.session.cursor == 0

    assert controller.key_pressed("l") is True
    assert controller.session.cursor == 1


def test_menu_dialog_does_not_leave_key_held(tmp_path, media_dir):
    dialogs = FakeDialogs(folder=media_dir)
    controller = _controller(tmp_path, dialogs)
    controller.key_pressed("o")
    assert len(controller.session) == 3
    controller.key_pressed("a")
    controller.key_pressed("a")
    assert [kind for kind, _ in dialogs.messages] == ["info", "info"]


def test_auto_repeat_release_press_pairs_are_ignored(tmp_path, media_dir):
    clock = SteppedClock()
    controller = _controller(tmp_path, FakeDialogs(folder=media_dir), clock=clock)
    controller.open_folder()
    assert controller.key_pressed("l") is True

    # X11 holding "l": release and press arrive with the same timestamp
    clock.now = 0.5
    controller.key_released("l")
    assert controller.key_pressed("l") is False
    clock.now = 1.0
    controller.key_released("l")
    assert controller.key_pressed("l") is False
    assert controller.session.cursor == 1

    # a real release followed by a later press fires again
    clock.now = 1.5
    controller.key_released("l")
    clock.now = 2.0
    assert controller.key_pressed("l") is True
    assert controller.session.cursor == 2


def test_export_flushes_debug_log(tmp_path, media_dir):
    dialogs = FakeDialogs(folder=media_dir, export_choice=True)
    controller = _controller(tmp_path, dialogs, debug=True)
    controller.open_folder()
    for key in ["j", "l", "l"]:
        _press(controller, key)

    output_dir = tmp_path / "Downloads" / "MediaSorter"
    logs = list(output_dir.glob("media_sorter_log_export_*.txt"))
    assert len(logs) == 1
    text = logs[0].read_text()
    assert "user:mark" in text
    assert "user:export" in text
    kind, message = dialogs.messages[-1]
    assert kind == "info"
    assert f"Debug log: {logs[0]}" in message
    assert len(controller.debug_log) == 0


def test_export_write_failure_keeps_marks(tmp_path, media_dir, monkeypatch):
    def fail_write(manifest, output_dir):
        raise OSError("disk full")

    monkeypatch.setattr("media_sorter.controller.write_manifest", fail_write)
    dialogs = FakeDialogs(folder=media_dir, export_choice=True)
    controller = _controller(tmp_path, dialogs)
    controller.open_folder()
    first = controller.session.current.path
    for key in ["j", "l", "l"]:
        _press(controller, key)

    assert controller.session.state is SessionState.AWAITING_EXPORT
    assert controller.session.marked == [first]
    assert len(controller.session) == 3
    kind, message = dialogs.messages[-1]
    assert kind == "error"
    assert "Could not write manifest" in message
    assert "disk full" in message
