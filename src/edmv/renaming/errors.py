"""Rename plan errors."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Sequence

if TYPE_CHECKING:
    from .models import RenameOperation


def _join(paths: Iterable[Path]) -> str:
    return ", ".join(str(path) for path in paths)


class RenameError(Exception):
    """Base exception for planning and executing renames.

    Attributes:
        code: Machine-readable identifier used by the CLI for JSON payloads.
        applied: Operations completed before an execution-phase failure.
        stranded: Temporary paths staged out but never staged back in.
    """

    code = "rename_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.applied: list[RenameOperation] = []
        self.stranded: list[Path] = []

    def record_progress(
        self,
        applied: Sequence["RenameOperation"],
        stranded: Sequence[Path] = (),
    ) -> None:
        """Attach execution progress to an error raised mid-batch."""
        self.applied = list(applied)
        self.stranded = list(stranded)

    def details(self) -> dict[str, Any]:
        """Return structured details describing the failure."""
        payload: dict[str, Any] = self._details()
        if self.applied:
            payload["applied"] = [
                {"source": str(op.source), "destination": str(op.destination), "kind": op.kind}
                for op in self.applied
            ]
        if self.stranded:
            payload["stranded"] = [str(path) for path in self.stranded]
        return payload

    def _details(self) -> dict[str, Any]:
        return {}


class MalformedPlan(RenameError):
    """Raised when the edited listing cannot be paired with the original paths."""

    code = "malformed_plan"


class SourceMissing(RenameError):
    """Raised when a path scheduled for renaming does not exist."""

    code = "source_missing"

    def __init__(self, paths: Sequence[Path]) -> None:
        self.paths = list(paths)
        super().__init__(f"Found path(s) that do not exist: {_join(self.paths)}")

    def _details(self) -> dict[str, Any]:
        return {"paths": [str(path) for path in self.paths]}


class DuplicateDestination(RenameError):
    """Raised when two or more sources are renamed to the same destination."""

    code = "duplicate_destination"

    def __init__(
        self,
        path: Path,
        sources: Sequence[Path],
        *,
        duplicates: Mapping[Path, Sequence[Path]] | None = None,
    ) -> None:
        self.path = path
        self.sources = list(sources)
        self.duplicates = {
            key: list(value) for key, value in (duplicates or {path: sources}).items()
        }
        super().__init__(f"Duplicate destination(s) found: {_join(self.duplicates)}")

    def _details(self) -> dict[str, Any]:
        return {
            "duplicates": {
                str(destination): [str(source) for source in sources]
                for destination, sources in self.duplicates.items()
            }
        }


class MissingDestinationDirectory(RenameError):
    """Raised when a destination's parent directory does not exist."""

    code = "missing_directory"

    def __init__(self, paths: Sequence[Path]) -> None:
        self.paths = list(paths)
        super().__init__(
            f"Found destination(s) with invalid directory(ies): {_join(self.paths)}"
        )

    def _details(self) -> dict[str, Any]:
        return {"paths": [str(path) for path in self.paths]}


class DestinationExists(RenameError):
    """Raised when a destination is occupied and overwriting is not allowed."""

    code = "destination_exists"

    def __init__(self, paths: Sequence[Path]) -> None:
        self.paths = list(paths)
        super().__init__(
            f"Destination(s) already exist: {_join(self.paths)}, use --force to overwrite"
        )

    @property
    def path(self) -> Path:
        return self.paths[0]

    def _details(self) -> dict[str, Any]:
        return {"paths": [str(path) for path in self.paths]}


class UnresolvableConflict(RenameError):
    """Raised when renames form a cycle and staging through temporary names is disabled."""

    code = "unresolvable_conflict"

    def __init__(self, cycles: Sequence[Sequence["RenameOperation"]]) -> None:
        self.cycles = [list(cycle) for cycle in cycles]
        rendered = "; ".join(
            " -> ".join([*(str(op.source) for op in cycle), str(cycle[0].source)])
            for cycle in self.cycles
        )
        super().__init__(
            f"Found rename cycle(s): {rendered}, use --resolve to stage through temporary names"
        )

    def _details(self) -> dict[str, Any]:
        return {"cycles": [[str(op.source) for op in cycle] for cycle in self.cycles]}


class TempNameExhausted(RenameError):
    """Raised when no unused temporary name can be found for a staged source."""

    code = "temp_name_exhausted"

    def __init__(self, source: Path, attempts: int) -> None:
        self.source = source
        self.attempts = attempts
        super().__init__(
            f"Unable to find a free temporary name for {source} after {attempts} attempts"
        )

    def _details(self) -> dict[str, Any]:
        return {"source": str(self.source), "attempts": self.attempts}


class RenameFailed(RenameError):
    """Raised when the operating system rejects a rename."""

    code = "rename_failed"

    def __init__(self, source: Path, destination: Path, cause: OSError) -> None:
        self.source = source
        self.destination = destination
        self.cause = cause
        reason = cause.strerror or str(cause)
        super().__init__(f"Failed to rename {source} -> {destination}: {reason}")

    def _details(self) -> dict[str, Any]:
        return {
            "source": str(self.source),
            "destination": str(self.destination),
            "cause": type(self.cause).__name__,
        }


__all__ = [
    "RenameError",
    "MalformedPlan",
    "SourceMissing",
    "DuplicateDestination",
    "MissingDestinationDirectory",
    "DestinationExists",
    "UnresolvableConflict",
    "TempNameExhausted",
    "RenameFailed",
]
