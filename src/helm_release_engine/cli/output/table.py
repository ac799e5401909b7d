"""Table output shared by CLI commands.

Wraps Rich's Table so every command renders release data the same way:
long values such as chart names and repository URLs fold onto the next line
instead of being truncated, and empty cells render as a dim dash.
"""

from __future__ import annotations

from typing import Any

from rich.table import Table as RichTable

EMPTY_CELL = "[dim]-[/dim]"


class Table(RichTable):
    """Rich Table with folding columns and placeholder cells.

    Usage:
        from helm_release_engine.cli.output import Table

        table = Table(title="Helm Releases")
        table.add_column("Chart")
        table.add_column("Revision", no_wrap=True)
        table.add_row("ingress-nginx", 3)
    """

    def add_column(self, *args: Any, overflow: Any = "fold", **kwargs: Any) -> None:
        """Add a column that folds overflowing text by default."""
        super().add_column(*args, overflow=overflow, **kwargs)

    def add_row(self, *cells: Any, **kwargs: Any) -> None:
        """Add a row, rendering ``None`` and empty strings as a placeholder."""
        rendered = [
            EMPTY_CELL if cell is None or cell == "" else _cell_text(cell) for cell in cells
        ]
        super().add_row(*rendered, **kwargs)


def _cell_text(cell: Any) -> Any:
    if isinstance(cell, bool):
        return "yes" if cell else "no"
    if isinstance(cell, int | float):
        return str(cell)
    return cell
