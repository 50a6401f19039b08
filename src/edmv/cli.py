"""Command line interface for edmv."""

from __future__ import annotations

import difflib
import logging
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax

from edmv.config import ConfigError, ConfigManager
from edmv.editor import edit_listing
from edmv.paths import collect_paths
from edmv.renaming import (
    ConflictAnalyzer,
    ConflictResolver,
    RenameError,
    RenameExecutor,
    RenameOperation,
    RenamePlanner,
    TempNameGenerator,
)

console = Console()
error_console = Console(stderr=True)


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    target = error_console if mode == "error" else console
    target.print(message, soft_wrap=isinstance(message, str))


def _format_summary_line(command: str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands.

    Args:
        command: Command name to include in the summary.
        metrics: Ordered mapping of metric names to values.

    Returns:
        str: Rich-formatted summary string.
    """

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary: {parts}.[/green]"


def _configure_logging(level: str) -> None:
    """Route `edmv` log records to stderr through rich."""

    logger = logging.getLogger("edmv")
    logger.handlers.clear()
    logger.addHandler(
        RichHandler(console=error_console, show_path=False, markup=False, rich_tracebacks=True)
    )
    logger.setLevel(level)


def _format_operation(operation: RenameOperation) -> str:
    line = escape(operation.describe())
    if operation.kind == "stage_out":
        return f"[dim]{line} (staged)[/dim]"
    return line


def _operation_payload(operation: RenameOperation) -> dict[str, str]:
    return {
        "source": str(operation.source),
        "destination": str(operation.destination),
        "kind": operation.kind,
    }


def _emit_progress(exc: RenameError, *, quiet: bool, summary_only: bool) -> None:
    """Tell the user which renames completed before an execution failure."""

    if exc.applied:
        _emit_message(
            f"[yellow]{len(exc.applied)} operation(s) applied before the failure:[/yellow]",
            mode="error",
            quiet=quiet,
            summary_only=summary_only,
        )
        for step, operation in enumerate(exc.applied, start=1):
            _emit_message(
                f"  {step}. {escape(operation.describe())}",
                mode="error",
                quiet=quiet,
                summary_only=summary_only,
            )
    if exc.stranded:
        _emit_message(
            "[red]Temporary paths left behind (rename them manually):[/red]",
            mode="error",
            quiet=quiet,
            summary_only=summary_only,
        )
        for path in exc.stranded:
            _emit_message(
                f"  - {escape(str(path))}", mode="error", quiet=quiet, summary_only=summary_only
            )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="edmv")
def cli() -> None:
    """edmv renames files by letting you edit their paths in your text editor."""


@cli.command()
@click.argument("paths", nargs=-1, type=click.Path(path_type=str))
@click.option("--editor", type=str, help="Editor command to use.")
@click.option("--force/--no-force", default=False, help="Overwrite existing files.")
@click.option(
    "--resolve/--no-resolve",
    default=False,
    help="Break rename cycles (swaps, rotations) through temporary names.",
)
@click.option("--dry-run", is_flag=True, help="Run without making any changes.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the renames.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.option("-v", "--verbose", is_flag=True, help="Log every planning and rename step.")
@click.pass_context
def rename(
    ctx: click.Context,
    paths: tuple[str, ...],
    editor: str | None,
    force: bool,
    resolve: bool,
    dry_run: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Edit PATHS in a text editor and rename them to match your edits.

    Without PATHS, the entries of the current directory are listed.

    Args:
        ctx: Click context used for parameter source inspection.
        paths: Paths to list for editing.
        editor: Editor command overriding configuration and environment.
        force: Whether existing destinations may be overwritten.
        resolve: Whether rename cycles are staged through temporary names.
        dry_run: If True, preview the renames without touching the filesystem.
        json_output: If True, emit JSON describing the planned or applied renames.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
        verbose: When True, log at DEBUG level.
    """

    json_enabled = json_output
    try:
        config = ConfigManager().load()
        _configure_logging("DEBUG" if verbose else config.logging.level)

        def _explicit(name: str) -> bool:
            return ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE

        quiet_enabled = quiet if _explicit("quiet") else config.cli.quiet_default
        summary_only = summary_mode if _explicit("summary_mode") else config.cli.summary_default
        force_enabled = force if _explicit("force") else config.rename.force
        resolve_enabled = resolve if _explicit("resolve") else config.rename.resolve

        if json_output:
            if _explicit("quiet") and quiet_enabled:
                raise click.ClickException("--json cannot be combined with --quiet.")
            if _explicit("summary_mode") and summary_only:
                raise click.ClickException("--json cannot be combined with --summary.")
            quiet_enabled = False
            summary_only = False

        if quiet_enabled and summary_only:
            raise click.ClickException(
                "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
            )

        listing = collect_paths(list(paths), include_hidden=config.rename.include_hidden)
        if not listing:
            _emit_message(
                "[yellow]No paths to edit.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            return

        edited = edit_listing(
            listing,
            editor=editor or config.editor.command,
            extension=config.editor.extension,
        )
        if edited is None:
            _emit_message(
                "[yellow]Edit cancelled; no changes applied.[/yellow]",
                mode="warning",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            return

        plan = RenamePlanner().build_plan(listing, edited)
        analysis = ConflictAnalyzer().analyze(plan, force=force_enabled)
        names = TempNameGenerator(
            prefix=config.staging.prefix,
            token_length=config.staging.token_length,
            max_token_length=config.staging.max_token_length,
            attempts=config.staging.attempts,
        )
        ordered = ConflictResolver(names).resolve(analysis, enabled=resolve_enabled)
        report = RenameExecutor().apply(ordered, force=force_enabled, dry_run=dry_run)

        changed = 0 if dry_run else report.renamed
        counts: dict[str, Any] = {
            "changed": changed,
            "planned": len(plan),
            "chains": len(analysis.chains),
            "cycles": len(analysis.cycles),
            "overwritten": len(analysis.overwrites),
        }
        if dry_run:
            counts["previewed"] = report.renamed

        if json_output:
            console.print_json(
                data={
                    "context": {
                        "dry_run": dry_run,
                        "force": force_enabled,
                        "resolve": resolve_enabled,
                    },
                    "operations": [_operation_payload(op) for op in report.operations],
                    "counts": counts,
                }
            )
            return

        for operation in report.operations:
            _emit_message(
                _format_operation(operation),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

        summary_metrics = {"changed": changed}
        if analysis.cycles:
            summary_metrics["cycles"] = len(analysis.cycles)
        if analysis.overwrites:
            summary_metrics["overwritten"] = len(analysis.overwrites)
        if dry_run:
            summary_metrics["previewed"] = report.renamed
            summary_metrics["dry_run"] = True
        _emit_message(
            _format_summary_line("Rename", summary_metrics),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
    except RenameError as exc:
        if not json_enabled:
            _emit_progress(exc, quiet=False, summary_only=False)
        _handle_cli_error(
            str(exc),
            code=exc.code,
            json_output=json_enabled,
            details=exc.details(),
            original=exc,
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_enabled, original=exc)
    except click.ClickException as exc:
        _handle_cli_error(str(exc), code="cli_error", json_output=json_enabled, original=exc)
    except Exception as exc:
        _handle_cli_error(
            f"Unexpected error while renaming paths: {exc}",
            code="internal_error",
            json_output=json_enabled,
            details={"exception": type(exc).__name__},
            original=exc,
        )


@cli.group()
def config() -> None:
    """Inspect or change the settings in ~/.edmv/config.yaml."""


def _settings_lines(text: str) -> list[str]:
    # Header comments carry a timestamp that changes on every save.
    return [line for line in text.splitlines() if not line.startswith("#")]


@config.command("view")
@click.option("--no-env", is_flag=True, help="Show the file's settings without EDMV__ overrides.")
def config_view(no_env: bool) -> None:
    """Print the settings edmv would run with."""
    try:
        settings = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    rendered = yaml.safe_dump(settings.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(rendered, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal, e.g. true, 12 or '.tmp-'.")
def config_set(key: str, value: str) -> None:
    """Store VALUE under the dotted KEY, e.g. `rename.resolve`."""
    manager = ConfigManager()
    manager.ensure_exists()
    try:
        before = _settings_lines(manager.read_text())
        manager.set_value(key, yaml.safe_load(value))
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    changes = "\n".join(
        difflib.unified_diff(
            before,
            _settings_lines(manager.read_text()),
            fromfile="before",
            tofile="after",
            lineterm="",
        )
    )
    if not changes:
        console.print(f"[yellow]{escape(key)} already has that value.[/yellow]")
        return
    console.print(Syntax(changes, "diff"))
    console.print(f"[green]Updated {escape(key)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file, keeping it only if it stays valid."""
    manager = ConfigManager()
    manager.ensure_exists()
    original = manager.read_text()

    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]Configuration unchanged.[/yellow]")
        return

    try:
        manager.replace_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print("[green]Configuration updated.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
