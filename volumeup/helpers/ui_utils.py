"""
CLI Utilities for VolumeUp

Rich-based helpers for CLI output.
Provides consistent UI components across all commands.
"""

from typing import Callable, List, Tuple

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

console = Console()


def print_success(message: str):
    """Print success message with green checkmark"""
    console.print(f"[green]✓[/green] {escape(message)}")


def print_error(message: str):
    """Print error message with red X"""
    console.print(f"[red]✗[/red] {escape(message)}")


def print_warning(message: str):
    """Print warning message with yellow warning symbol"""
    console.print(f"[yellow]⚠[/yellow]  {escape(message)}")


def print_info(message: str):
    """Print info message with cyan arrow"""
    console.print(f"[cyan]→[/cyan] {escape(message)}")


def create_table(title: str, columns: List[Tuple[str, str, int]]) -> Table:
    """
    Create a styled Rich table

    Args:
        title: Table title
        columns: List of (name, style, width) tuples

    Returns:
        Rich Table instance

    Example:
        table = create_table("Volumes", [
            ("Name", "green", 30),
            ("Driver", "white", 10),
        ])
        table.add_row("pgdata", "local")
    """
    table = Table(title=title, show_header=True, header_style="bold blue")
    for name, style, width in columns:
        table.add_column(name, style=style, width=width)
    return table


def with_spinner(message: str, func: Callable, *args, **kwargs):
    """
    Execute a function with a spinner animation

    Args:
        message: Message to show while spinning
        func: Function to execute
        *args: Positional arguments for func
        **kwargs: Keyword arguments for func

    Returns:
        Return value of func
    """
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description=message, total=None)
        return func(*args, **kwargs)
