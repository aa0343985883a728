"""Launcher for the media sorter review window."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from media_sorter.config import AppConfig, config_from_args
from media_sorter.controller import ReviewController
from media_sorter.dialogs import TkDialogs
from media_sorter.jobs import JobRunner
from media_sorter.trash import build_strategies

LOGGER = logging.getLogger("media_sorter")
console = Console()


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Review a folder of media files one at a time.")
    parser.add_argument("--folder", type=Path, help="Open this folder on start")
    parser.add_argument("--config", type=Path, default=Path("config.yaml"), help="Configuration YAML path")
    parser.add_argument("--downloads-dir", type=Path, help="Base directory for manifests and debug logs")
    parser.add_argument("--debug", action="store_true", help="Start with the debug/audit log enabled")
    parser.add_argument("--verbose", action="store_true", help="Verbose logging")
    return parser


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def build_controller(config: AppConfig, dialogs=None) -> ReviewController:
    strategies = build_strategies(config.trash_strategies, timeout=config.command_timeout)
    runner = JobRunner(strategies, missing_sample_size=config.missing_sample_size)
    return ReviewController(config, runner, dialogs or TkDialogs())


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    config = config_from_args(args)
    setup_logging(config.verbose)

    from media_sorter.viewer import ReviewWindow  # noqa: PLC0415 - selects the GUI backend

    controller = build_controller(config)
    window = ReviewWindow(controller)
    if args.folder:
        controller.open_folder(args.folder.expanduser())
    console.print(f"Manifests and logs go to [bold]{config.output_dir}[/bold]")
    window.show()
    if controller.running:
        controller.quit()


if __name__ == "__main__":
    main()
