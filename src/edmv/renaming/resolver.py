"""Resolve analyzed plans into a safe execution order."""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import Iterable

from .errors import TempNameExhausted, UnresolvableConflict
from .models import PlanAnalysis, RenameOperation, path_key

LOGGER = logging.getLogger(__name__)

DEFAULT_PREFIX = ".edmv-"


class TempNameGenerator:
    """Issue temporary names that collide with nothing in the plan or on disk.

    Tokens are derived from the source path and an attempt counter, so the same plan against the
    same directory state always yields the same names. After ``attempts`` collisions at one token
    length, the token is lengthened by ``token_length`` characters until ``max_token_length``.
    """

    def __init__(
        self,
        *,
        prefix: str = DEFAULT_PREFIX,
        token_length: int = 8,
        max_token_length: int = 32,
        attempts: int = 16,
    ) -> None:
        if token_length < 1 or max_token_length < token_length:
            raise ValueError("token lengths must satisfy 1 <= token_length <= max_token_length")
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.prefix = prefix
        self.token_length = token_length
        self.max_token_length = max_token_length
        self.attempts = attempts
        self._reserved: set[str] = set()

    def reset(self) -> None:
        """Forget every reserved and issued name."""
        self._reserved.clear()

    def reserve(self, paths: Iterable[Path]) -> None:
        """Mark paths that issued names must never equal."""
        self._reserved.update(path_key(path) for path in paths)

    def issue(self, source: Path) -> Path:
        """Return an unused temporary path next to ``source``.

        Raises:
            TempNameExhausted: If every candidate up to the maximum token length is taken.
        """
        tried = 0
        length = self.token_length
        while length <= self.max_token_length:
            for attempt in range(self.attempts):
                tried += 1
                candidate = source.with_name(
                    f"{self.prefix}{self._token(source, attempt, length)}-{source.name}"
                )
                key = path_key(candidate)
                if key in self._reserved or os.path.lexists(candidate):
                    continue
                self._reserved.add(key)
                return candidate
            LOGGER.debug("Temporary names for %s exhausted at length %d.", source, length)
            length += self.token_length
        raise TempNameExhausted(source, tried)

    def _token(self, source: Path, attempt: int, length: int) -> str:
        seed = f"{path_key(source)}\0{attempt}".encode("utf-8", "surrogateescape")
        digest = hashlib.sha256(seed).hexdigest()
        while len(digest) < length:
            digest += hashlib.sha256(digest.encode("ascii")).hexdigest()
        return digest[:length]


class ConflictResolver:
    """Flatten an analysis into direct, chained, and staged operations."""

    def __init__(self, names: TempNameGenerator | None = None) -> None:
        self._names = names or TempNameGenerator()

    def resolve(self, analysis: PlanAnalysis, *, enabled: bool = False) -> list[RenameOperation]:
        """Return the execution order for an analyzed plan.

        Args:
            analysis: Output of the conflict analyzer.
            enabled: Whether cycles may be broken by staging through temporary names.

        Returns:
            list[RenameOperation]: Independent operations, then chains (outlet first), then the
            stage-out and stage-in halves of every cycle.

        Raises:
            UnresolvableConflict: If the plan contains cycles and staging is disabled.
            TempNameExhausted: If a cycle member cannot be given a temporary name.
        """

        ordered: list[RenameOperation] = list(analysis.independent)
        for chain in analysis.chains:
            ordered.extend(chain)

        if not analysis.cycles:
            return ordered

        if not enabled:
            raise UnresolvableConflict(analysis.cycles)

        self._names.reset()
        self._names.reserve(
            path
            for op in analysis.plan.operations
            for path in (op.source, op.destination)
        )

        stage_out: list[RenameOperation] = []
        stage_in: list[RenameOperation] = []
        for cycle in analysis.cycles:
            for op in cycle:
                temporary = self._names.issue(op.source)
                stage_out.append(
                    RenameOperation(source=op.source, destination=temporary, kind="stage_out")
                )
                stage_in.append(
                    RenameOperation(source=temporary, destination=op.destination, kind="stage_in")
                )

        LOGGER.debug(
            "Staging %d operation(s) from %d cycle(s) through temporary names.",
            len(stage_out),
            len(analysis.cycles),
        )
        return ordered + stage_out + stage_in
