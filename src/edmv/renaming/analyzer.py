"""Conflict analysis for rename plans."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from .errors import (
    DestinationExists,
    DuplicateDestination,
    MalformedPlan,
    MissingDestinationDirectory,
    SourceMissing,
)
from .models import PlanAnalysis, RenameOperation, RenamePlan, path_key

LOGGER = logging.getLogger(__name__)


def same_inode(first: Path, second: Path) -> bool:
    """Return True when both paths lead to one inode without following symlinks."""
    try:
        left = os.lstat(first)
        right = os.lstat(second)
    except OSError:
        return False
    return (left.st_dev, left.st_ino) == (right.st_dev, right.st_ino)


def same_entry(first: Path, second: Path) -> bool:
    """Return True when two spellings differing only in case name one directory entry.

    Hard links share an inode under different names, so they are not the same entry.
    """
    if path_key(first).casefold() != path_key(second).casefold():
        return False
    return same_inode(first, second)


class ConflictAnalyzer:
    """Validate a rename plan and group its operations by dependency shape."""

    def analyze(self, plan: RenamePlan, *, force: bool = False) -> PlanAnalysis:
        """Classify the plan into independent operations, chains, and cycles.

        Args:
            plan: Plan produced by the planner.
            force: Whether occupied destinations outside the plan may be overwritten.

        Returns:
            PlanAnalysis: Classification of every operation in the plan.

        Raises:
            SourceMissing: If a source no longer exists.
            MalformedPlan: If a path is renamed together with a path inside it.
            DuplicateDestination: If two sources share a destination, or a destination is a listed
                path the user left unchanged.
            MissingDestinationDirectory: If a destination's directory does not exist.
            DestinationExists: If a destination is occupied and force is disabled.
        """

        operations = plan.operations
        self._check_sources(operations)
        self._check_nesting(operations)
        self._check_duplicates(operations, plan.unchanged)
        self._check_directories(operations)

        by_source = {operation.source_key: index for index, operation in enumerate(operations)}
        overwrites = self._check_collisions(operations, by_source, force)
        independent, chains, cycles = self._classify(operations, by_source)

        LOGGER.debug(
            "Analyzed %d operation(s): %d independent, %d chain(s), %d cycle(s).",
            len(operations),
            len(independent),
            len(chains),
            len(cycles),
        )
        return PlanAnalysis(
            plan=plan,
            independent=independent,
            chains=chains,
            cycles=cycles,
            overwrites=overwrites,
        )

    # ------------------------------------------------------------------ #
    # Validation                                                         #
    # ------------------------------------------------------------------ #

    def _check_sources(self, operations: Sequence[RenameOperation]) -> None:
        missing = [op.source for op in operations if not os.path.lexists(op.source)]
        if missing:
            raise SourceMissing(missing)

    def _check_nesting(self, operations: Sequence[RenameOperation]) -> None:
        involved: dict[str, Path] = {}
        for op in operations:
            involved[op.source_key] = op.source
            involved[op.destination_key] = op.destination

        for op in operations:
            for path, key in ((op.source, op.source_key), (op.destination, op.destination_key)):
                for parent in Path(key).parents:
                    outer = involved.get(str(parent))
                    if outer is not None:
                        raise MalformedPlan(
                            f"Cannot rename {path} in the same batch as its parent directory "
                            f"{outer}"
                        )

    def _check_duplicates(
        self,
        operations: Sequence[RenameOperation],
        unchanged: Sequence[Path],
    ) -> None:
        targets: dict[str, Path] = {}
        groups: dict[str, list[Path]] = {}
        for op in operations:
            targets.setdefault(op.destination_key, op.destination)
            groups.setdefault(op.destination_key, []).append(op.source)
        # An unchanged line still claims its path.
        for path in unchanged:
            key = path_key(path)
            if key in groups:
                groups[key].append(path)

        duplicates = {
            targets[key]: sources for key, sources in groups.items() if len(sources) > 1
        }
        if duplicates:
            path, sources = next(iter(duplicates.items()))
            raise DuplicateDestination(path, sources, duplicates=duplicates)

    def _check_directories(self, operations: Sequence[RenameOperation]) -> None:
        missing = [
            op.destination for op in operations if not Path(op.destination_key).parent.is_dir()
        ]
        if missing:
            raise MissingDestinationDirectory(missing)

    def _check_collisions(
        self,
        operations: Sequence[RenameOperation],
        by_source: dict[str, int],
        force: bool,
    ) -> list[Path]:
        occupied = [
            op.destination
            for op in operations
            if os.path.lexists(op.destination)
            and op.destination_key not in by_source
            and not same_entry(op.source, op.destination)
        ]
        if occupied and not force:
            raise DestinationExists(occupied)
        for path in occupied:
            LOGGER.warning("Existing path %s will be overwritten.", path)
        return occupied

    # ------------------------------------------------------------------ #
    # Dependency classification                                          #
    # ------------------------------------------------------------------ #

    def _classify(
        self,
        operations: Sequence[RenameOperation],
        by_source: dict[str, int],
    ) -> tuple[
        list[RenameOperation],
        list[list[RenameOperation]],
        list[list[RenameOperation]],
    ]:
        # blockers[i] = j means operation j must vacate operation i's destination first.
        blockers: dict[int, int] = {}
        dependents: dict[int, int] = {}
        for index, op in enumerate(operations):
            blocker = by_source.get(op.destination_key)
            if blocker is not None and blocker != index:
                blockers[index] = blocker
                dependents[blocker] = index

        independent: list[RenameOperation] = []
        chains: list[list[RenameOperation]] = []
        cycles: list[list[RenameOperation]] = []
        visited: set[int] = set()

        for index, op in enumerate(operations):
            if index in visited:
                continue
            if index not in blockers and index not in dependents:
                visited.add(index)
                independent.append(op)
                continue

            walk = [index]
            current = index
            cyclic = False
            while current in blockers:
                current = blockers[current]
                if current == index:
                    cyclic = True
                    break
                walk.append(current)

            if cyclic:
                visited.update(walk)
                cycles.append([operations[member] for member in walk])
                continue

            # walk[-1] is the chain's outlet; run it first, then whoever was waiting on it.
            ordered = [walk[-1]]
            while ordered[-1] in dependents:
                ordered.append(dependents[ordered[-1]])
            visited.update(ordered)
            chains.append([operations[member] for member in ordered])

        return independent, chains, cycles
