"""Shared utility functions for boilergen.

Provides the process-wide Rich console, coloured message helpers, the
template listing table, and small file-system helpers used by the
scaffolder and the CLI.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

console = Console()


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Args:
        path: Directory path.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


def is_within(path: Path, root: Path) -> bool:
    """Return ``True`` if *path* is *root* itself or lies beneath it.

    Both arguments should already be absolute and normalised.
    """
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_header(title: str, color: str = "bright_blue") -> None:
    """Print a full-width rule with *title* in the middle."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_section(title: str, lines: Iterable[str], style: str, bullet: str) -> None:
    """Print a bold section title followed by one indented line per item.

    Nothing is printed when *lines* is empty.
    """
    items = list(lines)
    if not items:
        return
    console.print(f"[bold {style}]{title}[/bold {style}]")
    for line in items:
        console.print(f"  [{style}]{bullet} {escape(line)}[/{style}]", highlight=False)


def print_template_table(rows: Iterable[tuple[str, str]], title: str = "Available Templates") -> None:
    """Print a two-column name/description table of templates."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Template", style="green", no_wrap=True)
    table.add_column("Description")

    for name, description in rows:
        table.add_row(name, description)

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_info(message: str) -> None:
    """Print a blue informational message."""
    console.print(f"[blue]{escape(message)}[/blue]")
