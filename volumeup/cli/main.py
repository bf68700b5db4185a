"""
Main CLI application using Typer

Entry point for the VolumeUp CLI.

Follows the tool bench pattern: configuration is loaded once in the
callback and commands fetch it (and the Docker gateway) from the context.
"""

import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.markup import escape

from ..cores.backup_manager import BackupManager
from ..cores.restore_manager import RestoreManager
from ..cores.runtime_gateway import DockerGateway
from ..errors import VolumeUpError
from ..helpers import ui_utils as ui
from ..helpers.config import VolumeUpConfig
from ..helpers.constants import CONFIG_ENV_VAR, VERSION
from ..helpers.logging import get_logger, log_manager
from ..helpers.system_utils import SystemUtils

app = typer.Typer(
    name="volumeup",
    help="VolumeUp - Backup & restore Docker volumes",
    add_completion=False,
    no_args_is_help=True,
)

console = ui.console
logger = get_logger(__name__)


# -------------------------
# Application Context
# -------------------------

@app.callback()
def main_callback(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        envvar=CONFIG_ENV_VAR,
        help="Path to a JSON configuration file.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR).",
    ),
):
    """
    VolumeUp - Backup & restore Docker volumes through a temporary container.
    """
    ctx.ensure_object(dict)

    try:
        cfg = VolumeUpConfig.load_or_default(config_path)
        _configure_logging(cfg, log_level or cfg.logging.level)
    except (VolumeUpError, ValueError) as e:
        ui.print_error(str(e))
        raise typer.Exit(1)

    ctx.obj["config"] = cfg
    ctx.obj["log_level"] = log_level or cfg.logging.level


# -------------------------
# Helper Functions
# -------------------------

def _configure_logging(cfg: VolumeUpConfig, level: str) -> None:
    log_manager.configure(
        level=level,
        log_file=cfg.logging.file,
        max_size_mb=cfg.logging.max_size_mb,
        backup_count=cfg.logging.backup_count,
    )


def get_config(ctx: typer.Context) -> VolumeUpConfig:
    """Get config from the tool bench."""
    if ctx.obj is None or ctx.obj.get("config") is None:
        return VolumeUpConfig()
    return ctx.obj["config"]


def apply_verbose(ctx: typer.Context, verbose: bool) -> None:
    """--verbose on a command switches console logging to DEBUG."""
    if verbose:
        _configure_logging(get_config(ctx), "DEBUG")


def get_gateway(ctx: typer.Context) -> DockerGateway:
    """Get or create the Docker gateway from the tool bench."""
    ctx.ensure_object(dict)
    if "gateway" not in ctx.obj:
        docker_cfg = get_config(ctx).docker
        ctx.obj["gateway"] = DockerGateway(base_url=docker_cfg.base_url, timeout=docker_cfg.timeout)
    return ctx.obj["gateway"]


def _fail(message: str) -> NoReturn:
    ui.print_error(message)
    raise typer.Exit(1)


# -------------------------
# Commands
# -------------------------

@app.command()
def backup(
    ctx: typer.Context,
    volume_name: str = typer.Argument(..., help="Docker volume to back up."),
    backup_path: Path = typer.Argument(..., help="Directory to write the archive to."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Custom name for the backup file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Backup a Docker volume to a file"""
    apply_verbose(ctx, verbose)
    try:
        ui.print_info(f"Starting backup of volume '{volume_name}' to '{backup_path}'")
        manager = BackupManager(get_gateway(ctx), get_config(ctx))
        result = ui.with_spinner(
            f"Backing up {volume_name}...",
            manager.backup_volume,
            volume_name,
            backup_path,
            name,
        )
    except VolumeUpError as e:
        _fail(str(e))
    except Exception as e:
        logger.debug("Unexpected error during backup", exc_info=True)
        _fail(f"Unexpected error: {e}")

    ui.print_success("Backup completed successfully!")
    ui.print_success(
        f"Backup file: {result.archive_path} "
        f"({SystemUtils.format_bytes(result.size_bytes)}, "
        f"{SystemUtils.format_duration(result.duration_seconds)})"
    )


@app.command()
def restore(
    ctx: typer.Context,
    backup_file: Path = typer.Argument(..., help="Archive created by 'volumeup backup'."),
    volume_name: str = typer.Argument(..., help="Volume to restore into."),
    force: bool = typer.Option(False, "--force", "-f", help="Force restore even if volume exists."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """Restore a Docker volume from a backup file"""
    apply_verbose(ctx, verbose)
    try:
        ui.print_info(f"Starting restore of volume '{volume_name}' from '{backup_file}'")
        manager = RestoreManager(get_gateway(ctx), get_config(ctx))
        ui.with_spinner(
            f"Restoring {volume_name}...",
            manager.restore_volume,
            backup_file,
            volume_name,
            force,
        )
    except VolumeUpError as e:
        _fail(str(e))
    except Exception as e:
        logger.debug("Unexpected error during restore", exc_info=True)
        _fail(f"Unexpected error: {e}")

    ui.print_success("Restore completed successfully!")
    ui.print_success(f"Volume '{volume_name}' has been restored")


@app.command(name="list")
def list_volumes(
    ctx: typer.Context,
    show_all: bool = typer.Option(False, "--all", "-a", help="Show all volumes including auto-generated ones."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output."),
):
    """List manually created Docker volumes"""
    apply_verbose(ctx, verbose)
    try:
        volumes = get_gateway(ctx).list_volumes()
    except VolumeUpError as e:
        _fail(f"Error listing volumes: {e}")

    if not volumes:
        ui.print_warning("No Docker volumes found")
        return

    named = [v for v in volumes if not v.is_anonymous]
    anonymous = [v for v in volumes if v.is_anonymous]

    if named:
        table = ui.create_table("Manually Created Volumes", [
            ("Name", "green", 40),
            ("Driver", "white", 10),
        ])
        for volume in sorted(named, key=lambda v: v.name):
            table.add_row(escape(volume.name), escape(volume.driver))
        console.print(table)
        ui.print_info(f"Total: {len(named)} manually created volumes")
    else:
        ui.print_warning("No manually created volumes found")

    if show_all and anonymous:
        table = ui.create_table(f"Auto-generated Volumes ({len(anonymous)})", [
            ("Name", "yellow", 20),
            ("Driver", "white", 10),
        ])
        for volume in anonymous:
            table.add_row(f"{volume.name[:17]}...", escape(volume.driver))
        console.print(table)
        ui.print_info(
            f"Total: {len(volumes)} volumes (including {len(anonymous)} auto-generated)"
        )
    elif anonymous:
        ui.print_info(f"Use --all to show {len(anonymous)} auto-generated volumes")


@app.command()
def version():
    """Show version information"""
    console.print(f"[blue]VolumeUp v{VERSION}[/blue]")


def cli_main():
    """
    Entry point for CLI

    This function is called by the console script entry point.
    """
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
