"""Planner pairing original paths with their edited counterparts."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from .errors import MalformedPlan
from .models import RenameOperation, RenamePlan, path_key

LOGGER = logging.getLogger(__name__)


def _as_path(value: Path | str) -> Path:
    # Same expansion and normalization as path_key, kept relative.
    return Path(os.path.normpath(os.path.expanduser(os.fspath(value))))


class RenamePlanner:
    """Derive rename plans from an original listing and its edited copy."""

    def build_plan(
        self,
        originals: Sequence[Path | str],
        edited: Sequence[str],
    ) -> RenamePlan:
        """Produce a rename plan from positionally aligned listings.

        Args:
            originals: Paths written to the listing, in listing order.
            edited: Lines read back from the listing after editing.

        Returns:
            RenamePlan: One operation per line whose path changed, plus the paths left alone.

        Raises:
            MalformedPlan: If lines were added or removed, a line was blanked, or a path is
                listed twice with different targets.
        """

        if len(originals) != len(edited):
            raise MalformedPlan(
                f"Number of paths changed, should be {len(originals)}, got {len(edited)}"
            )

        plan = RenamePlan()
        targets: dict[str, str] = {}

        for index, (original, entry) in enumerate(zip(originals, edited), start=1):
            if not entry.strip():
                raise MalformedPlan(
                    f"Line {index} is empty; remove files outside of edmv instead of "
                    "deleting their lines"
                )

            source = _as_path(original)
            destination = _as_path(entry)
            source_key = path_key(source)
            destination_key = path_key(destination)

            previous = targets.get(source_key)
            if previous is not None:
                if previous != destination_key:
                    raise MalformedPlan(
                        f"Path {source} is listed more than once with different destinations"
                    )
                continue
            targets[source_key] = destination_key

            if source_key == destination_key:
                plan.unchanged.append(source)
                continue

            plan.operations.append(RenameOperation(source=source, destination=destination))

        LOGGER.debug(
            "Built plan with %d operation(s) from %d listed path(s).",
            len(plan.operations),
            len(originals),
        )
        return plan
