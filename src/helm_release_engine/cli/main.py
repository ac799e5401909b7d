"""Main CLI entry point using Typer."""

from __future__ import annotations

from typing import Any

import typer
import yaml
from rich.console import Console

from helm_release_engine import __version__
from helm_release_engine.cli.output import Table
from helm_release_engine.core.plugins.manager import PluginManager
from helm_release_engine.integrations.kubernetes.config import load_config
from helm_release_engine.logging.config import configure_logging
from helm_release_engine.plugins.helm.plugin import HelmPlugin

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"hre version {__version__}")
        raise typer.Exit()


def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Write console logs as JSON.",
    ),
) -> None:
    """hre - inspect Helm release state and synthesize Helm commands."""
    configure_logging(verbose=verbose, debug=debug, json_output=json_logs)


def create_app(
    config: dict[str, Any] | None = None,
    plugin_manager: PluginManager | None = None,
) -> typer.Typer:
    """Build the CLI with the built-in Helm plugin and any installed plugins.

    Args:
        config: Parsed config file contents (empty when None).
        plugin_manager: Manager to register plugins with (new when None).

    Raises:
        ValueError: If the configuration is invalid.
    """
    app = typer.Typer(
        name="hre",
        help="Helm release state engine.",
        add_completion=True,
        no_args_is_help=True,
    )
    app.callback()(main)

    manager = plugin_manager or PluginManager()
    manager.register_plugin(HelmPlugin())
    manager.load_all()
    manager.initialize_all(config or {})
    manager.register_commands(app)

    @app.command("plugins")
    def list_plugins() -> None:
        """List registered plugins."""
        table = Table(title="Installed Plugins")
        table.add_column("Name", style="cyan")
        table.add_column("Version", style="green")
        table.add_column("Description")
        table.add_column("Initialized")
        for info in manager.list_plugins():
            table.add_row(info["name"], info["version"], info["description"], info["initialized"])
        console.print(table)

    return app


def run() -> None:
    """Console script entry point."""
    manager = PluginManager()
    try:
        app = create_app(load_config(), manager)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error:[/red] Invalid configuration: {e}")
        raise SystemExit(1) from e
    try:
        app()
    finally:
        manager.cleanup_all()


if __name__ == "__main__":
    run()
