"""Shared utility functions for crafter.

Provides blank-string helpers, duration formatting and the Rich-based console
reporting used by the bootstrap orchestrator and the scaffold generator.
"""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


def is_blank(value: str | None) -> bool:
    """Return ``True`` for ``None``, empty and whitespace-only strings."""
    return value is None or not value.strip()


def blank_to_none(value: str | None) -> str | None:
    """Strip *value* and collapse blank strings to ``None``.

    Examples::

        blank_to_none("  demo ") -> "demo"
        blank_to_none("   ")     -> None
    """
    if is_blank(value):
        return None
    return value.strip()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


PHASE_COLORS: dict[str, str] = {
    "skeleton": "bright_green",
    "foundry": "bright_yellow",
}


def print_banner(message: str, *, title: str, style: str = "bright_cyan") -> None:
    """Print *message* inside a bordered panel."""
    console.print(
        Panel(message, title=f"[bold]{title}[/bold]", border_style=style)
    )


def print_phase_header(phase: str, name: str) -> None:
    """Print a prominent phase header using Rich.

    Renders a full-width rule with the phase name, coloured according to the
    phase.

    Args:
        phase: Phase key (``"skeleton"`` or ``"foundry"``).
        name: Phase display name.
    """
    color = PHASE_COLORS.get(phase, "white")
    console.print()
    console.print(
        Rule(
            f"[bold {color}] {name.upper()} [/bold {color}]",
            style=color,
        )
    )
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, escape(str(value)))

    console.print(table)
    console.print()


def print_file_action(action: str, path: str | Path) -> None:
    """Print one dim line describing a generated scaffold entry."""
    console.print(f"  [dim]{action:<7} {escape(str(path))}[/dim]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
