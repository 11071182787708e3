"""Shared CLI utilities - colors, console, helpers."""

import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

NEON_CYAN = "#80ffea"
ELECTRIC_PURPLE = "#e135ff"
ELECTRIC_YELLOW = "#f1fa8c"
SUCCESS_GREEN = "#50fa7b"
ERROR_RED = "#ff6363"

# Shared console instance (for styled output only, NOT for JSON)
console = Console()


def print_json(data: object) -> None:
    """Print JSON to stdout without Rich formatting.

    Never use console.print() for JSON output - Rich wraps long lines at
    terminal width, inserting literal newlines that break JSON parsing.
    """
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[{SUCCESS_GREEN}]✓[/{SUCCESS_GREEN}] {message}")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[{ERROR_RED}]✗[/{ERROR_RED}] {message}")


def warn(message: str) -> None:
    """Print a warning message."""
    console.print(f"[{ELECTRIC_YELLOW}]![/{ELECTRIC_YELLOW}] {message}")


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[{NEON_CYAN}]→[/{NEON_CYAN}] {message}")


def create_table(title: str | None = None, *columns: str) -> Table:
    """Create a styled table."""
    table = Table(title=title, border_style=NEON_CYAN)
    for i, col in enumerate(columns):
        style = ELECTRIC_PURPLE if i == 0 else NEON_CYAN
        justify = "right" if col.lower() in ("#", "count") else "left"
        table.add_column(col, style=style, justify=justify)
    return table


def create_panel(content: str, title: str | None = None) -> Panel:
    """Create a styled panel."""
    return Panel(
        content,
        title=f"[{ELECTRIC_PURPLE}]{title}[/{ELECTRIC_PURPLE}]" if title else None,
        border_style=NEON_CYAN,
    )


def format_status(status: str) -> str:
    """Format a status name for display."""
    return f"[{NEON_CYAN}]{status}[/{NEON_CYAN}]" if status else "[dim](blank)[/dim]"
