"""Matplotlib review window.

Shows the current media file, the review position and a key legend, and
forwards key presses and releases to the controller.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import matplotlib

matplotlib.rcParams["toolbar"] = "None"

_BACKEND_ERROR: Optional[str] = None
try:
    matplotlib.use("TkAgg")
except Exception as e:  # noqa: BLE001
    _BACKEND_ERROR = str(e)
    matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
from PIL import Image, ImageOps

from .models import MediaEntry

LOGGER = logging.getLogger(__name__)

MAX_DISPLAY_SIZE = 2048
HELP_TEXT = (
    "1/J = Remove  |  K = Back  |  L = Keep\n"
    "O = Open Folder  |  R = Run Job  |  D = Toggle Debug  |  A = About  |  Q = Quit"
)


def load_display_image(path: Path) -> Optional[np.ndarray]:
    """Load an image for display, or None when Pillow cannot read it."""
    try:
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            img = img.convert("RGB")
            if max(img.size) > MAX_DISPLAY_SIZE:
                img.thumbnail((MAX_DISPLAY_SIZE, MAX_DISPLAY_SIZE), Image.LANCZOS)
            return np.asarray(img, dtype="uint8")
    except (OSError, ValueError) as exc:
        LOGGER.warning("Cannot display %s: %s", path, exc)
        return None


class ReviewWindow:
    def __init__(self, controller):
        if _BACKEND_ERROR:
            LOGGER.warning("TkAgg backend unavailable (%s); window will not be interactive", _BACKEND_ERROR)
        self.controller = controller
        self._closed = False
        self.fig, self.ax = plt.subplots(figsize=(7.2, 9.6))
        self.fig.set_facecolor("white")
        self.fig.subplots_adjust(left=0.02, right=0.98, top=0.88, bottom=0.08)
        self.fig.text(0.5, 0.015, HELP_TEXT, ha="center", fontsize=8, color="#555555")
        try:
            self.fig.canvas.manager.set_window_title("Media Sorter")
            # matplotlib binds 'k', 'l', 'o', 'q' ... to its own actions
            self.fig.canvas.mpl_disconnect(self.fig.canvas.manager.key_press_handler_id)
        except AttributeError:
            pass
        self.fig.canvas.mpl_connect("key_press_event", self._on_key_press)
        self.fig.canvas.mpl_connect("key_release_event", self._on_key_release)
        self.fig.canvas.mpl_connect("close_event", self._on_close)
        controller.attach_view(self)

    def _on_key_press(self, event) -> None:
        self.controller.key_pressed(event.key)

    def _on_key_release(self, event) -> None:
        self.controller.key_released(event.key)

    def _on_close(self, _event) -> None:
        self._closed = True
        if self.controller.running:
            self.controller.quit()

    def render(self, controller) -> None:
        if self._closed:
            return
        session = controller.session
        ax = self.ax
        ax.clear()
        ax.axis("off")

        entry = session.current
        if entry is None:
            ax.text(0.5, 0.5, controller.status, ha="center", va="center", fontsize=13,
                    color="#666666", transform=ax.transAxes)
        else:
            self._draw_entry(entry)
            marked = session.is_marked(entry)
            title = f"{session.cursor + 1} / {len(session)} - {entry.name}"
            ax.set_title(title + ("  [MARKED]" if marked else ""), fontsize=11,
                         color="#d32f2f" if marked else "#333333")

        folder = Path(session.folder).name if session.folder else "Media Sorter"
        debug = "  [DEBUG]" if controller.debug_log is not None else ""
        self.fig.suptitle(f"{folder}{debug}\n{controller.status}", fontsize=12, y=0.98)
        self.fig.canvas.draw_idle()

    def _draw_entry(self, entry: MediaEntry) -> None:
        ax = self.ax
        array = None
        if entry.is_image and entry.extension != ".svg":
            array = load_display_image(Path(entry.path))
        if array is not None:
            ax.imshow(array)
            return
        label = "VIDEO" if entry.is_video else "PREVIEW UNAVAILABLE"
        ax.text(0.5, 0.55, label, ha="center", va="center", fontsize=20, fontweight="bold",
                color="#333333", transform=ax.transAxes)
        ax.text(0.5, 0.45, entry.name, ha="center", va="center", fontsize=11,
                color="#666666", transform=ax.transAxes, wrap=True)

    def show(self) -> None:
        plt.show()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            plt.close(self.fig)
