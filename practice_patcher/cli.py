#!/usr/bin/env python3
"""
Hyper Demon Practice Patcher - Command Line Interface
=====================================================

Date: October 19, 2026
License: GNU General Public License v3.0 (GPL-3.0)

Description:
    Interactive entry point. Run without a subcommand it behaves like the
    classic patcher: shows a banner, asks "(P)atch or (U)npatch", applies
    the catalog to hyperdemon.exe in the current directory and waits for
    Enter before closing. Subcommands inspect the binary or a catalog
    without writing anything.

Commands:
    practice-patcher [--action patch|unpatch] [--no-pause] [--no-backup]
    practice-patcher status
    practice-patcher check-catalog [CATALOG]
    practice-patcher history [--count N] [--errors]
    practice-patcher backups
    practice-patcher settings [SECTION KEY VALUE]

Functions:
    main() -> None
    format_error(error: PatchError, color: bool) -> str

Variables (Module-level):
    logger: logging.Logger - Application logger instance
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from . import __version__, backup_manager
from .catalog import CatalogError, format_tree, load_catalog
from .driver import Action, PatchDriver, parse_action
from .errors import MissingBinaryError, PatchError, ReadFailError
from .operation_logger import OperationLogger
from .patch import CompositePatch, PatchState, find_overlaps
from .settings_manager import DEFAULT_SETTINGS, SettingsError, SettingsManager, get_settings_manager

logger = logging.getLogger(__name__)

BANNER = (
    "Hyper Demon Practice Patcher\n"
    "----------------------------\n"
    f"v{__version__}"
)

_STATE_COLORS = {
    PatchState.UNPATCHED: None,
    PatchState.PATCHED: "green",
    PatchState.MIXED: "yellow",
    PatchState.MODIFIED: "red",
    PatchState.OUT_OF_BOUNDS: "red",
}


@dataclass
class CliState:
    settings: SettingsManager
    binary_path: Path
    catalog_path: Path
    color: bool

    def operation_logger(self) -> Optional[OperationLogger]:
        if not self.settings.enable_operation_log:
            return None
        return OperationLogger(self.settings.logs_directory)


def format_error(error: PatchError, color: bool = True) -> str:
    """Single human-readable message for a PatchError."""
    if not error.is_failure:
        return error.message

    text = click.style(error.message, fg="red") if color else error.message
    if isinstance(error, MissingBinaryError):
        text += "\n" + error.hint
    return text


def _fail(message: str, color: bool) -> str:
    return click.style(message, fg="red") if color else message


def _load_catalog(state: CliState) -> CompositePatch:
    return load_catalog(state.catalog_path)


def _run_patcher(state: CliState, action: Optional[str], backup: bool) -> int:
    oplog = state.operation_logger()
    operation = "run"
    try:
        catalog = _load_catalog(state)
        backups_dir = state.settings.backups_directory if backup else None
        with PatchDriver(state.binary_path, catalog, backups_dir=backups_dir,
                         reject_overlaps=state.settings.reject_overlaps) as driver:
            if action is None:
                click.echo("What would you like to do?")
                click.echo("(P)atch or (U)npatch")
                try:
                    action = click.prompt(">", default="", show_default=False, prompt_suffix=" ")
                except click.Abort:
                    # stdin closed; same as answering nothing
                    action = ""

            selected = parse_action(action)
            operation = selected.value
            click.echo()
            click.echo("Patching..." if selected is Action.PATCH else "Unpatching...")
            result = driver.run(selected)
    except PatchError as e:
        logger.debug(f"Run stopped: {e!r}")
        click.echo(format_error(e, state.color))
        if oplog is not None:
            oplog.log_operation(operation, "failure" if e.is_failure else "info", str(e))
        return 1 if e.is_failure else 0
    except CatalogError as e:
        click.echo(_fail(f"Err: {e}", state.color))
        if oplog is not None:
            oplog.log_operation(operation, "failure", str(e))
        return 1

    if result.backup_path is not None:
        click.echo(f"Backup saved to {result.backup_path}")
    click.echo("All done!")
    if oplog is not None:
        oplog.log_operation(
            operation, "success",
            f"{result.patch_count} region(s), {result.bytes_written} bytes written to {result.binary_path}")
    return 0


@click.group(invoke_without_command=True)
@click.option("--config", "config_file", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Settings file (default: ./practice_patcher.ini)")
@click.option("--binary", "binary_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Game binary to patch")
@click.option("--catalog", "catalog_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Patch catalog JSON file")
@click.option("--action", type=click.Choice(["patch", "unpatch"], case_sensitive=False),
              default=None, help="Skip the prompt and run this direction")
@click.option("--no-pause", is_flag=True, help="Do not wait for Enter before exiting")
@click.option("--no-backup", is_flag=True, help="Do not back up the binary before writing")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="practice-patcher")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[Path], binary_path: Optional[Path],
        catalog_path: Optional[Path], action: Optional[str], no_pause: bool,
        no_backup: bool, verbose: bool) -> None:
    """Apply or remove the Hyper Demon practice patches."""
    try:
        settings = get_settings_manager(config_file)
    except SettingsError as e:
        raise click.ClickException(str(e))

    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    state = CliState(
        settings=settings,
        binary_path=binary_path or Path(settings.binary_name),
        catalog_path=catalog_path or settings.catalog_file,
        color=settings.enable_colors,
    )
    ctx.obj = state

    if ctx.invoked_subcommand is not None:
        return

    click.echo(BANNER)
    click.echo()
    code = _run_patcher(state, action, backup=settings.backup_before_write and not no_backup)

    if settings.pause_on_exit and not no_pause:
        click.echo()
        click.pause("Press Enter to close...")
    ctx.exit(code)


@cli.command()
@click.pass_obj
def status(state: CliState) -> None:
    """Show whether each patch is applied, without writing anything."""
    try:
        catalog = _load_catalog(state)
        try:
            data = state.binary_path.read_bytes()
        except FileNotFoundError as e:
            raise MissingBinaryError(str(e), binary_name=state.binary_path.name) from e
        except OSError as e:
            raise ReadFailError(str(e)) from e
    except PatchError as e:
        click.echo(format_error(e, state.color))
        sys.exit(1)
    except CatalogError as e:
        click.echo(_fail(f"Err: {e}", state.color))
        sys.exit(1)

    for descriptor in catalog.descriptors():
        patch_state = descriptor.state(data)
        label = click.style(patch_state.value, fg=_STATE_COLORS[patch_state]) if state.color else patch_state.value
        click.echo(f"  0x{descriptor.location:08X}  {descriptor.label:<32} {label}")

    overall = catalog.state(data)
    click.echo(f"\n{state.binary_path.name}: {overall.value}")


@cli.command("check-catalog")
@click.argument("catalog_file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def check_catalog(state: CliState, catalog_file: Optional[Path]) -> None:
    """Print the catalog tree and report overlapping regions."""
    try:
        catalog = load_catalog(catalog_file or state.catalog_path)
    except CatalogError as e:
        click.echo(_fail(f"Err: {e}", state.color))
        sys.exit(1)

    click.echo(format_tree(catalog))
    overlaps = find_overlaps(catalog)
    if not overlaps:
        click.echo("\nNo overlapping regions.")
        return

    click.echo(_fail(f"\n{len(overlaps)} overlapping region pair(s):", state.color))
    for first, second in overlaps:
        click.echo(f"  {first.label} @ 0x{first.location:08X} <-> {second.label} @ 0x{second.location:08X}")
    sys.exit(1)


@cli.command()
@click.option("--count", type=click.IntRange(min=1), default=10, show_default=True,
              help="Number of entries to show")
@click.option("--errors", "errors_only", is_flag=True, help="Only show failed runs")
@click.pass_obj
def history(state: CliState, count: int, errors_only: bool) -> None:
    """Show recent patch/unpatch runs from the operation log."""
    oplog = OperationLogger(state.settings.logs_directory)
    entries = oplog.get_error_logs(count) if errors_only else oplog.get_recent_logs(count)
    if not entries:
        click.echo("No operations logged yet.")
        return
    for entry in entries:
        click.echo(f"{entry.get('timestamp', '')}  {entry.get('operation', ''):<8} "
                   f"{entry.get('status', ''):<8} {entry.get('details', '')}")


@cli.command()
@click.pass_obj
def backups(state: CliState) -> None:
    """List backups of the binary and check their sha256 sidecars."""
    backups_dir = state.settings.backups_directory
    found = backup_manager.list_backups(backups_dir)
    if not found:
        click.echo(f"No backups found in {backups_dir}.")
        return

    invalid = 0
    for path in found:
        result = backup_manager.verify_backup(path)
        if result['valid']:
            click.echo(f"  {path.name}  {result['file_size']:>10,} bytes  OK")
            continue
        invalid += 1
        click.echo(_fail(f"  {path.name}  {result['file_size']:>10,} bytes  INVALID", state.color))
        for error in result['errors']:
            click.echo(f"      {error}")

    click.echo(f"\n{len(found)} backup(s), {invalid} invalid")
    if invalid:
        sys.exit(1)


@cli.command()
@click.argument("section", required=False)
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.pass_obj
def settings(state: CliState, section: Optional[str], key: Optional[str], value: Optional[str]) -> None:
    """Show all settings, or change one: settings SECTION KEY VALUE."""
    mgr = state.settings
    if section is None:
        click.echo(f"[{mgr.config_file}]")
        for name, values in mgr.get_current_settings().items():
            click.echo(f"\n{name}:")
            for option, current in values.items():
                click.echo(f"  {option:<22} {current}")
        return

    if key is None or value is None:
        raise click.UsageError("Give SECTION, KEY and VALUE to change a setting.")

    section = section.upper()
    if key not in DEFAULT_SETTINGS.get(section, {}):
        raise click.UsageError(f"Unknown setting: {section}.{key}")

    try:
        mgr.set_setting(section, key, value)
    except SettingsError as e:
        raise click.ClickException(str(e))
    click.echo(f"{section}.{key} = {value}")


def main() -> None:
    cli(prog_name="practice-patcher")


if __name__ == "__main__":
    main()
