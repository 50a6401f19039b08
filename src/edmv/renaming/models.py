"""Rename plan data models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

OperationKind = Literal["rename", "stage_out", "stage_in"]


def path_key(path: Path | str) -> str:
    """Return the identity used to compare paths within a plan.

    Paths are expanded and made absolute without resolving symlinks, so renaming a link renames
    the link itself rather than its target.

    Args:
        path: Path as typed by the user or produced by the resolver.

    Returns:
        str: Normalized absolute path string.
    """
    return os.path.normpath(os.path.abspath(os.path.expanduser(os.fspath(path))))


class RenameOperation(BaseModel):
    """Represents a single rename request.

    Attributes:
        source: Path that currently exists and will be moved.
        destination: Path the source will occupy after the rename.
        kind: Whether this is a user rename or one half of a staged cycle rename.
    """

    model_config = ConfigDict(frozen=True)

    source: Path
    destination: Path
    kind: OperationKind = "rename"

    @property
    def source_key(self) -> str:
        return path_key(self.source)

    @property
    def destination_key(self) -> str:
        return path_key(self.destination)

    def describe(self) -> str:
        """Return a `source -> destination` line for previews and logs."""
        return f"{self.source} -> {self.destination}"


class RenamePlan(BaseModel):
    """Ordered rename operations derived from one editing session.

    Attributes:
        operations: Renames for every line whose path changed, in listing order.
        unchanged: Listed paths left as they were; they stay occupied after the run.
    """

    operations: List[RenameOperation] = Field(default_factory=list)
    unchanged: List[Path] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.operations)

    @property
    def is_empty(self) -> bool:
        return not self.operations


class PlanAnalysis(BaseModel):
    """Classification of a plan produced by the conflict analyzer.

    Attributes:
        plan: Plan that was analyzed.
        independent: Operations with no dependency on any other operation.
        chains: Dependency chains, each already ordered outlet first.
        cycles: Operations forming dependency cycles, in cycle order.
        overwrites: Destinations that exist on disk and will be replaced under force.
    """

    plan: RenamePlan
    independent: List[RenameOperation] = Field(default_factory=list)
    chains: List[List[RenameOperation]] = Field(default_factory=list)
    cycles: List[List[RenameOperation]] = Field(default_factory=list)
    overwrites: List[Path] = Field(default_factory=list)

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    @property
    def has_chains(self) -> bool:
        return bool(self.chains)


class ExecutionReport(BaseModel):
    """Outcome of applying an ordered operation list.

    Attributes:
        operations: Operations applied, or previewed under dry-run, in execution order.
        dry_run: Indicates that no filesystem mutation took place.
    """

    operations: List[RenameOperation] = Field(default_factory=list)
    dry_run: bool = False

    @property
    def count(self) -> int:
        return len(self.operations)

    @property
    def renamed(self) -> int:
        """Number of user-visible renames, counting a staged pair once."""
        return sum(1 for operation in self.operations if operation.kind != "stage_out")

    def preview(self) -> list[tuple[Path, Path]]:
        """Return the (source, destination) pairs in execution order."""
        return [(operation.source, operation.destination) for operation in self.operations]


__all__ = [
    "OperationKind",
    "RenameOperation",
    "RenamePlan",
    "PlanAnalysis",
    "ExecutionReport",
    "path_key",
]
