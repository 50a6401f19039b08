"""Tests for applying ordered rename operations."""

from pathlib import Path

import pytest

from edmv.renaming import (
    DestinationExists,
    RenameExecutor,
    RenameFailed,
    RenameOperation,
)


def _op(root: Path, source: str, destination: str, kind: str = "rename") -> RenameOperation:
    return RenameOperation(source=root / source, destination=root / destination, kind=kind)


def test_executor_applies_renames_in_order(tmp_path: Path) -> None:
    (tmp_path / "a").write_text("A", encoding="utf-8")
    (tmp_path / "b").write_text("B", encoding="utf-8")

    report = RenameExecutor().apply([_op(tmp_path, "b", "c"), _op(tmp_path, "a", "b")])

    assert report.count == 2
    assert report.renamed == 2
    assert not report.dry_run
    assert not (tmp_path / "a").exists()
    assert (tmp_path / "b").read_text(encoding="utf-8") == "A"
    assert (tmp_path / "c").read_text(encoding="utf-8") == "B"


def test_dry_run_leaves_filesystem_untouched(tmp_path: Path) -> None:
    (tmp_path / "a").write_text("A", encoding="utf-8")
    operations = [_op(tmp_path, "a", "b")]
    executor = RenameExecutor()

    first = executor.apply(operations, dry_run=True)
    second = executor.apply(operations, dry_run=True)

    assert first.preview() == second.preview() == [(tmp_path / "a", tmp_path / "b")]
    assert first.dry_run
    assert (tmp_path / "a").exists()
    assert not (tmp_path / "b").exists()


def test_destination_created_after_analysis_halts_the_run(tmp_path: Path) -> None:
    (tmp_path / "a").write_text("A", encoding="utf-8")
    (tmp_path / "b").write_text("B", encoding="utf-8")
    (tmp_path / "y").write_text("Y", encoding="utf-8")
    operations = [_op(tmp_path, "a", "x"), _op(tmp_path, "b", "y"), _op(tmp_path, "x", "z")]

    with pytest.raises(DestinationExists) as excinfo:
        RenameExecutor().apply(operations)

    assert excinfo.value.path == tmp_path / "y"
    assert excinfo.value.applied == [operations[0]]
    assert (tmp_path / "x").read_text(encoding="utf-8") == "A"
    assert (tmp_path / "b").read_text(encoding="utf-8") == "B"
    assert (tmp_path / "y").read_text(encoding="utf-8") == "Y"
    assert excinfo.value.details()["applied"] == [
        {"source": str(tmp_path / "a"), "destination": str(tmp_path / "x"), "kind": "rename"}
    ]


def test_force_overwrites_existing_destination(tmp_path: Path) -> None:
    (tmp_path / "a").write_text("A", encoding="utf-8")
    (tmp_path / "e").write_text("E", encoding="utf-8")

    RenameExecutor().apply([_op(tmp_path, "a", "e")], force=True)

    assert not (tmp_path / "a").exists()
    assert (tmp_path / "e").read_text(encoding="utf-8") == "A"


def test_staging_never_overwrites_even_with_force(tmp_path: Path) -> None:
    (tmp_path / "a").write_text("A", encoding="utf-8")
    (tmp_path / ".tmp-a").write_text("T", encoding="utf-8")

    with pytest.raises(DestinationExists):
        RenameExecutor().apply([_op(tmp_path, "a", ".tmp-a", "stage_out")], force=True)

    assert (tmp_path / ".tmp-a").read_text(encoding="utf-8") == "T"


def test_os_failure_is_wrapped_and_reports_stranded_paths(tmp_path: Path) -> None:
    (tmp_path / "a").write_text("A", encoding="utf-8")
    operations = [
        _op(tmp_path, "a", ".tmp-a", "stage_out"),
        _op(tmp_path, "missing", ".tmp-missing", "stage_out"),
        _op(tmp_path, ".tmp-a", "b", "stage_in"),
    ]

    with pytest.raises(RenameFailed) as excinfo:
        RenameExecutor().apply(operations)

    error = excinfo.value
    assert error.source == tmp_path / "missing"
    assert isinstance(error.cause, FileNotFoundError)
    assert error.applied == [operations[0]]
    assert error.stranded == [tmp_path / ".tmp-a"]
    assert error.details()["stranded"] == [str(tmp_path / ".tmp-a")]
    assert (tmp_path / ".tmp-a").exists()


def test_report_counts_staged_pairs_once(tmp_path: Path) -> None:
    (tmp_path / "a").write_text("A", encoding="utf-8")
    operations = [
        _op(tmp_path, "a", ".tmp-a", "stage_out"),
        _op(tmp_path, ".tmp-a", "b", "stage_in"),
    ]

    report = RenameExecutor().apply(operations)

    assert report.count == 2
    assert report.renamed == 1
    assert (tmp_path / "b").read_text(encoding="utf-8") == "A"
