"""Executor for rename plans."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from .analyzer import same_entry, same_inode
from .errors import DestinationExists, RenameError, RenameFailed
from .models import ExecutionReport, RenameOperation

LOGGER = logging.getLogger(__name__)


class RenameExecutor:
    """Apply ordered rename operations one at a time."""

    def apply(
        self,
        operations: Sequence[RenameOperation],
        *,
        force: bool = False,
        dry_run: bool = False,
    ) -> ExecutionReport:
        """Apply the operations in order, halting on the first failure.

        Args:
            operations: Execution order produced by the resolver.
            force: Whether occupied destinations may be overwritten.
            dry_run: When true, record the operations without touching the filesystem.

        Returns:
            ExecutionReport: Operations applied or previewed, in order.

        Raises:
            DestinationExists: If a destination became occupied and may not be overwritten.
            RenameFailed: If the operating system rejects a rename.
        """

        report = ExecutionReport(dry_run=dry_run)
        if dry_run:
            for op in operations:
                LOGGER.debug("Dry run: %s", op.describe())
                report.operations.append(op)
            return report

        staged: dict[str, Path] = {}
        for step, op in enumerate(operations, start=1):
            try:
                self._apply_one(op, force=force)
            except RenameError as exc:
                LOGGER.error("Halting at step %d of %d: %s", step, len(operations), exc)
                exc.record_progress(report.operations, list(staged.values()))
                raise
            report.operations.append(op)
            if op.kind == "stage_out":
                staged[op.destination_key] = op.destination
            elif op.kind == "stage_in":
                staged.pop(op.source_key, None)

        return report

    def _apply_one(self, op: RenameOperation, *, force: bool) -> None:
        occupied = os.path.lexists(op.destination) and not same_entry(op.source, op.destination)
        if occupied:
            if not force or op.kind == "stage_out":
                raise DestinationExists([op.destination])
            LOGGER.warning("Overwriting %s", op.destination)

        LOGGER.debug("Renaming %s", op.describe())
        try:
            if occupied and same_inode(op.source, op.destination):
                # rename(2) between hard links of one file is a no-op.
                op.source.unlink()
            elif occupied:
                op.source.replace(op.destination)
            else:
                op.source.rename(op.destination)
        except OSError as exc:
            raise RenameFailed(op.source, op.destination, exc) from exc
