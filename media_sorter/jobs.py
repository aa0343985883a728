"""Batch deletion jobs driven by a removal manifest.

Pipeline: parse and validate, normalise paths, verify every path exists, then
delete one file at a time through the ordered trash strategies. A single
missing file aborts the whole job before anything is deleted. Once deletion
starts every file is attempted; one file's failure is recorded in its result
and never stops the batch.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from .audit import DebugLog
from .errors import ConfigurationError, EmptyJobError, MissingFilesError
from .manifest import parse_manifest, read_manifest
from .models import DeletionResult, JobReport, RemovalManifest
from .paths import VerifiedPath, verify_paths
from .trash import BaseTrashStrategy, StrategyFailed, TrashSuccess

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, DeletionResult], None]


class JobRunner:
    def __init__(
        self,
        strategies: Sequence[BaseTrashStrategy],
        debug_log: Optional[DebugLog] = None,
        missing_sample_size: int = 5,
    ):
        if not strategies:
            raise ConfigurationError("JobRunner needs at least one trash strategy")
        self.strategies: List[BaseTrashStrategy] = list(strategies)
        self.debug_log = debug_log
        self.missing_sample_size = missing_sample_size

    # --- entry points ----------------------------------------------------

    def run_manifest_text(self, text: Union[str, bytes], progress: Optional[ProgressCallback] = None) -> JobReport:
        return self.run_manifest(parse_manifest(text), progress=progress)

    def run_manifest_file(self, path: Path, progress: Optional[ProgressCallback] = None) -> JobReport:
        LOGGER.info("Loading manifest %s", path)
        report = self.run_manifest(read_manifest(path), progress=progress)
        report.source = str(path)
        return report

    def run_manifest(self, manifest: RemovalManifest, progress: Optional[ProgressCallback] = None) -> JobReport:
        report = self.run_paths(manifest.removed_files, progress=progress)
        report.source = manifest.folder or None
        return report

    def run_paths(self, raw_paths: Sequence[str], progress: Optional[ProgressCallback] = None) -> JobReport:
        """Verify then delete ``raw_paths``; used directly for an in-session mark set."""
        if not raw_paths:
            raise EmptyJobError()
        verified = self.verify(raw_paths)
        self._audit_operation("job_start", len(verified), [v.normalized for v in verified])
        results: List[DeletionResult] = []
        for index, record in enumerate(verified):
            result = self.delete_one(record)
            results.append(result)
            if progress is not None:
                progress(index + 1, len(verified), result)
        report = JobReport(results=results)
        LOGGER.info("Job finished: %s", report.summary())
        self._audit_operation(
            "job_end",
            len(results),
            [r.path for r in report.failed],
            notes=report.summary(),
        )
        return report

    # --- pipeline steps --------------------------------------------------

    def verify(self, raw_paths: Sequence[str]) -> List[VerifiedPath]:
        verified, missing = verify_paths(raw_paths)
        if missing:
            self._audit_operation("job_aborted_missing", len(missing), missing)
            raise MissingFilesError(missing, self.missing_sample_size)
        return verified

    def delete_one(self, record: VerifiedPath) -> DeletionResult:
        target = record.target or record.normalized
        last_reason = "no trash strategy succeeded"
        for strategy in self.strategies:
            outcome = strategy.attempt(target)
            if isinstance(outcome, TrashSuccess):
                LOGGER.info("Removed %s via %s", target, outcome.strategy)
                return DeletionResult(path=record.normalized, success=True)
            if isinstance(outcome, StrategyFailed):
                last_reason = f"{outcome.strategy}: {outcome.reason}"
        LOGGER.error("Could not remove %s (%s)", target, last_reason)
        return DeletionResult(path=record.normalized, success=False, error=last_reason)

    def _audit_operation(self, operation: str, count: int, files: List[str], notes: Optional[str] = None) -> None:
        if self.debug_log is not None:
            self.debug_log.log_operation(operation, file_count=count, files=files, notes=notes)
