"""Output formatters for hre commands.

Commands hand over plain dicts (or lists of them) and pick a formatter by
``OutputFormat``. Machine formats are printed without Rich markup or line
wrapping so the output can be piped into other tools.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum
from typing import Any

import yaml
from rich.console import Console

from helm_release_engine.cli.output import Table


class OutputFormat(StrEnum):
    """Supported output formats for CLI commands."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


class ReleaseFormatter(ABC):
    """Base class for release output formatters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def format_list(
        self,
        rows: Sequence[dict[str, Any]],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        """Display a list of records."""

    @abstractmethod
    def format_dict(self, data: dict[str, Any], title: str = "") -> None:
        """Display a single record."""

    def _emit(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)


class TableFormatter(ReleaseFormatter):
    """Rich table output."""

    def format_list(
        self,
        rows: Sequence[dict[str, Any]],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        table = Table(title=title or None, show_header=True)
        for _field, header in columns:
            table.add_column(header, style="cyan" if header in ("Name", "Namespace") else None)
        for row in rows:
            table.add_row(*(row.get(field) for field, _ in columns))

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {len(rows)}[/dim]")

    def format_dict(self, data: dict[str, Any], title: str = "") -> None:
        table = Table(title=title or None, show_header=True)
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")
        for key, value in data.items():
            if isinstance(value, dict | list):
                value = json.dumps(value)
            table.add_row(key, value)
        self.console.print(table)


class JsonFormatter(ReleaseFormatter):
    """JSON output."""

    def format_list(
        self,
        rows: Sequence[dict[str, Any]],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        self._emit(json.dumps({"data": list(rows), "total": len(rows)}, indent=2, default=str))

    def format_dict(self, data: dict[str, Any], title: str = "") -> None:
        self._emit(json.dumps(data, indent=2, default=str))


class YamlFormatter(ReleaseFormatter):
    """YAML output."""

    def format_list(
        self,
        rows: Sequence[dict[str, Any]],
        columns: list[tuple[str, str]],
        title: str = "",
    ) -> None:
        self._emit(yaml.safe_dump(list(rows), default_flow_style=False, sort_keys=False))

    def format_dict(self, data: dict[str, Any], title: str = "") -> None:
        self._emit(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))


def get_formatter(format_type: OutputFormat, console: Console | None = None) -> ReleaseFormatter:
    """Return the formatter for ``format_type``."""
    formatters: dict[OutputFormat, type[ReleaseFormatter]] = {
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.JSON: JsonFormatter,
        OutputFormat.YAML: YamlFormatter,
    }
    return formatters.get(format_type, TableFormatter)(console or Console())
