"""Editor session used to collect the user's renames."""

from __future__ import annotations

import logging
from typing import Sequence

import click

from .paths import parse_listing, render_listing

LOGGER = logging.getLogger(__name__)


def edit_listing(
    paths: Sequence[str],
    *,
    editor: str | None = None,
    extension: str = ".txt",
) -> list[str] | None:
    """Open the listing in an editor and return the edited lines.

    Args:
        paths: Paths to list, one per line.
        editor: Editor command; click falls back to `$VISUAL`, `$EDITOR`, then a platform default.
        extension: Suffix of the temporary listing file.

    Returns:
        list[str] | None: Edited lines, or None when the editor exited without saving.

    Raises:
        click.ClickException: If the editor cannot be launched or exits with an error.
    """

    LOGGER.debug("Opening %d path(s) in %s.", len(paths), editor or "the default editor")
    edited = click.edit(render_listing(paths), editor=editor, extension=extension)
    if edited is None:
        return None
    return parse_listing(edited)
