"""Centralized CLI output utilities.

Usage:
    from helm_release_engine.cli.output import Table

    table = Table(title="Releases")
    table.add_column("Name", style="cyan")
    table.add_row("web")
    console.print(table)
"""

from helm_release_engine.cli.output.table import Table

__all__ = ["Table"]
