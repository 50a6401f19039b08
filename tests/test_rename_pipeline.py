"""End-to-end tests running plan, analysis, resolution, and execution together."""

import os
from pathlib import Path

import pytest

from edmv.renaming import (
    ConflictAnalyzer,
    ConflictResolver,
    DestinationExists,
    DuplicateDestination,
    ExecutionReport,
    RenameExecutor,
    RenamePlanner,
)


def _files(root: Path, **contents: str) -> None:
    for name, text in contents.items():
        (root / name).write_text(text, encoding="utf-8")


def _run(
    root: Path,
    originals: list[str],
    edited: list[str],
    **options: bool,
) -> ExecutionReport:
    return _run_listing(
        [str(root / name) for name in originals],
        [str(root / name) for name in edited],
        **options,
    )


def _run_listing(
    originals: list[str],
    edited: list[str],
    *,
    force: bool = False,
    resolve: bool = False,
    dry_run: bool = False,
) -> ExecutionReport:
    plan = RenamePlanner().build_plan(originals, edited)
    analysis = ConflictAnalyzer().analyze(plan, force=force)
    ordered = ConflictResolver().resolve(analysis, enabled=resolve)
    return RenameExecutor().apply(ordered, force=force, dry_run=dry_run)


def _snapshot(root: Path) -> dict[str, str]:
    return {path.name: path.read_text(encoding="utf-8") for path in sorted(root.iterdir())}


def test_independent_renames_map_sources_to_destinations(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B", c="C")

    report = _run(tmp_path, ["a", "b", "c"], ["d", "e", "f"])

    assert report.count == 3
    assert _snapshot(tmp_path) == {"d": "A", "e": "B", "f": "C"}


def test_dry_run_is_repeatable_and_side_effect_free(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B")
    before = _snapshot(tmp_path)

    first = _run(tmp_path, ["a", "b"], ["b", "a"], resolve=True, dry_run=True)
    second = _run(tmp_path, ["a", "b"], ["b", "a"], resolve=True, dry_run=True)

    assert first.preview() == second.preview()
    assert first.count == 4
    assert _snapshot(tmp_path) == before


def test_duplicate_destination_performs_no_renames(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B")

    with pytest.raises(DuplicateDestination) as excinfo:
        _run(tmp_path, ["a", "b"], ["c", "c"])

    assert excinfo.value.path == tmp_path / "c"
    assert excinfo.value.sources == [tmp_path / "a", tmp_path / "b"]
    assert _snapshot(tmp_path) == {"a": "A", "b": "B"}


def test_swap_with_resolution(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B")

    _run(tmp_path, ["a", "b"], ["b", "a"], resolve=True)

    assert _snapshot(tmp_path) == {"a": "B", "b": "A"}


def test_rotation_with_resolution(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B", c="C")

    _run(tmp_path, ["a", "b", "c"], ["b", "c", "a"], resolve=True)

    assert _snapshot(tmp_path) == {"a": "C", "b": "A", "c": "B"}


def test_chain_runs_from_its_outlet(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B", c="C")

    report = _run(tmp_path, ["a", "b", "c"], ["b", "c", "d"])

    assert [(source.name, destination.name) for source, destination in report.preview()] == [
        ("c", "d"),
        ("b", "c"),
        ("a", "b"),
    ]
    assert _snapshot(tmp_path) == {"b": "A", "c": "B", "d": "C"}


def test_existing_destination_without_force(tmp_path: Path) -> None:
    _files(tmp_path, a="A", e="E")

    with pytest.raises(DestinationExists) as excinfo:
        _run(tmp_path, ["a"], ["e"])

    assert excinfo.value.paths == [tmp_path / "e"]
    assert _snapshot(tmp_path) == {"a": "A", "e": "E"}


def test_existing_destination_with_force(tmp_path: Path) -> None:
    _files(tmp_path, a="A", e="E")

    _run(tmp_path, ["a"], ["e"], force=True)

    assert _snapshot(tmp_path) == {"e": "A"}


def test_unchanged_entries_are_ignored(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B")

    report = _run(tmp_path, ["a", "b"], ["a", "b"])

    assert report.count == 0
    assert _snapshot(tmp_path) == {"a": "A", "b": "B"}


def test_cycles_chains_and_independent_renames_together(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B", c="C", d="D", x="X")

    _run(tmp_path, ["a", "b", "c", "d", "x"], ["b", "a", "d", "e", "y"], resolve=True)

    assert _snapshot(tmp_path) == {"a": "B", "b": "A", "d": "C", "e": "D", "y": "X"}


@pytest.fixture
def home_and_work(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[Path, Path]:
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return home, work


def test_home_relative_destination_is_renamed_where_it_was_checked(
    home_and_work: tuple[Path, Path],
) -> None:
    home, work = home_and_work
    _files(work, first="F", a="A")

    report = _run_listing(["first", "a"], ["second", "~/a"])

    assert report.renamed == 2
    assert _snapshot(work) == {"second": "F"}
    assert _snapshot(home) == {"a": "A"}


def test_home_relative_source_is_renamed(home_and_work: tuple[Path, Path]) -> None:
    home, _ = home_and_work
    _files(home, a="A")

    _run_listing(["~/a"], ["~/b"])

    assert _snapshot(home) == {"b": "A"}


def test_spellings_of_one_path_are_the_same_path(home_and_work: tuple[Path, Path]) -> None:
    _, work = home_and_work
    _files(work, a="A", b="B")

    report = _run_listing(["a", "./b"], [str(work / "a"), "sub/../c"])

    assert report.renamed == 1
    assert _snapshot(work) == {"a": "A", "c": "B"}


def test_spellings_of_one_destination_are_duplicates(home_and_work: tuple[Path, Path]) -> None:
    home, _ = home_and_work
    _files(home, a="A", b="B")

    with pytest.raises(DuplicateDestination):
        _run_listing(["~/a", "~/b"], ["~/c", str(home / "c")])

    assert _snapshot(home) == {"a": "A", "b": "B"}


def test_destination_kept_by_an_unchanged_line_is_a_duplicate(tmp_path: Path) -> None:
    _files(tmp_path, a="A", b="B")

    with pytest.raises(DuplicateDestination) as excinfo:
        _run(tmp_path, ["a", "b"], ["b", "b"], force=True)

    assert excinfo.value.duplicates == {tmp_path / "b": [tmp_path / "a", tmp_path / "b"]}
    assert _snapshot(tmp_path) == {"a": "A", "b": "B"}


def test_hard_link_destination_is_a_collision(tmp_path: Path) -> None:
    _files(tmp_path, a="A")
    os.link(tmp_path / "a", tmp_path / "b")

    with pytest.raises(DestinationExists):
        _run(tmp_path, ["a"], ["b"])

    assert _snapshot(tmp_path) == {"a": "A", "b": "A"}


def test_forced_rename_onto_hard_link_removes_the_source(tmp_path: Path) -> None:
    _files(tmp_path, a="A")
    os.link(tmp_path / "a", tmp_path / "b")

    report = _run(tmp_path, ["a"], ["b"], force=True)

    assert report.renamed == 1
    assert _snapshot(tmp_path) == {"b": "A"}
