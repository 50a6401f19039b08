"""Collect the paths listed for editing and parse edited listings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

from edmv.renaming import MalformedPlan, SourceMissing, path_key


def _is_hidden(name: str) -> bool:
    return name.startswith(".") and name not in (".", "..")


def collect_paths(
    paths: Sequence[str],
    *,
    include_hidden: bool = False,
    root: Path | None = None,
) -> list[str]:
    """Return the ordered listing of paths to edit.

    Explicit paths are kept as typed with repeats dropped (first occurrence wins). Without
    explicit paths, the entries of ``root`` (the working directory by default) are listed by name.

    Args:
        paths: Paths given on the command line.
        include_hidden: Whether dot-entries are listed when scanning a directory.
        root: Directory to scan when ``paths`` is empty.

    Returns:
        list[str]: Paths in listing order.

    Raises:
        SourceMissing: If any explicit path does not exist.
        MalformedPlan: If a path cannot be written on a single listing line.
    """

    if paths:
        missing = [Path(path) for path in paths if not os.path.lexists(path)]
        if missing:
            raise SourceMissing(missing)
        listing: list[str] = []
        seen: set[str] = set()
        for path in paths:
            key = path_key(path)
            if key in seen:
                continue
            seen.add(key)
            listing.append(path)
    else:
        directory = root or Path.cwd()
        names = sorted(
            entry.name
            for entry in directory.iterdir()
            if include_hidden or not _is_hidden(entry.name)
        )
        listing = names if root is None else [str(directory / name) for name in names]

    for path in listing:
        if "\n" in path or "\r" in path:
            raise MalformedPlan(f"Path {path!r} contains a line break and cannot be edited")
    return listing


def render_listing(paths: Sequence[str]) -> str:
    """Return the text written to the editor: one path per line."""
    return "".join(f"{path}\n" for path in paths)


def parse_listing(text: str) -> list[str]:
    """Split edited text into entries, ignoring trailing blank lines."""
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    while lines and not lines[-1].strip():
        lines.pop()
    return lines
