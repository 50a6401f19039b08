"""Rename planning, conflict analysis, and execution."""

from .analyzer import ConflictAnalyzer
from .errors import (
    DestinationExists,
    DuplicateDestination,
    MalformedPlan,
    MissingDestinationDirectory,
    RenameError,
    RenameFailed,
    SourceMissing,
    TempNameExhausted,
    UnresolvableConflict,
)
from .executor import RenameExecutor
from .models import ExecutionReport, PlanAnalysis, RenameOperation, RenamePlan, path_key
from .planner import RenamePlanner
from .resolver import ConflictResolver, TempNameGenerator

__all__ = [
    "ConflictAnalyzer",
    "ConflictResolver",
    "DestinationExists",
    "DuplicateDestination",
    "ExecutionReport",
    "MalformedPlan",
    "MissingDestinationDirectory",
    "PlanAnalysis",
    "RenameError",
    "RenameExecutor",
    "RenameFailed",
    "RenameOperation",
    "RenamePlan",
    "RenamePlanner",
    "SourceMissing",
    "TempNameExhausted",
    "TempNameGenerator",
    "UnresolvableConflict",
    "path_key",
]
