"""Native pickers and modal messages backed by tkinter."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOGGER = logging.getLogger(__name__)


class TkDialogs:
    """Folder/file pickers and blocking message boxes.

    A hidden Tk root is created lazily so the matplotlib window can keep its
    own event loop.
    """

    def __init__(self, title: str = "Media Sorter"):
        self.title = title
        self._root = None

    def _parent(self):
        import tkinter as tk  # noqa: PLC0415

        if self._root is None:
            self._root = tk.Tk()
            self._root.withdraw()
        self._root.attributes("-topmost", True)
        return self._root

    def pick_folder(self) -> Optional[Path]:
        from tkinter import filedialog  # noqa: PLC0415

        chosen = filedialog.askdirectory(parent=self._parent(), title="Open Folder", mustexist=True)
        return Path(chosen) if chosen else None

    def pick_manifest(self, initial_dir: Optional[Path] = None) -> Optional[Path]:
        from tkinter import filedialog  # noqa: PLC0415

        chosen = filedialog.askopenfilename(
            parent=self._parent(),
            title="Run Job: choose a manifest",
            initialdir=str(initial_dir) if initial_dir and initial_dir.exists() else None,
            filetypes=[("Manifest", "*.json"), ("All files", "*.*")],
        )
        return Path(chosen) if chosen else None

    def ask_export(self, marked: int, total: int) -> Optional[bool]:
        """True = export, False = discard, None = keep reviewing."""
        from tkinter import messagebox  # noqa: PLC0415

        return messagebox.askyesnocancel(
            self.title,
            f"Reached the end of the folder.\n\n{marked} of {total} file(s) marked for removal.\n\n"
            "Yes: export manifest\nNo: discard marks\nCancel: keep reviewing",
            parent=self._parent(),
        )

    def info(self, message: str) -> None:
        from tkinter import messagebox  # noqa: PLC0415

        messagebox.showinfo(self.title, message, parent=self._parent())

    def warning(self, message: str) -> None:
        from tkinter import messagebox  # noqa: PLC0415

        messagebox.showwarning(self.title, message, parent=self._parent())

    def error(self, message: str) -> None:
        from tkinter import messagebox  # noqa: PLC0415

        messagebox.showerror(self.title, message, parent=self._parent())

    def close(self) -> None:
        if self._root is not None:
            try:
                self._root.destroy()
            except Exception as exc:  # noqa: BLE001
                LOGGER.debug("Tk root already gone: %s", exc)
            self._root = None
