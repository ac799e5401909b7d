"""Plugin contract for the hre CLI, built on pluggy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    import typer

PROJECT_NAME = "helm_release_engine"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class _PluginSpec:
    """Hooks every plugin may implement."""

    @hookspec
    def initialize(self, config: dict[str, Any]) -> None:
        """Initialize the plugin with its section of the config file."""

    @hookspec
    def register_commands(self, app: typer.Typer) -> None:
        """Attach the plugin's command groups to the root Typer app."""

    @hookspec
    def cleanup(self) -> None:
        """Release clients and other resources on shutdown."""


class Plugin:
    """Base class for hre plugins.

    Subclasses must set ``name`` and ``version`` and usually override
    ``on_initialize`` and ``register_commands``.
    """

    name: str = ""
    version: str = ""
    description: str = ""

    def __init__(self) -> None:
        if not self.name or not self.version:
            raise ValueError(f"{type(self).__name__} must define 'name' and 'version'")
        self._config: dict[str, Any] = {}
        self._initialized = False

    @hookimpl
    def initialize(self, config: dict[str, Any]) -> None:
        self._config = dict(config)
        self.on_initialize()
        self._initialized = True

    def on_initialize(self) -> None:
        """Hook for subclasses to build clients from ``self._config``."""

    @hookimpl
    def register_commands(self, app: typer.Typer) -> None:
        """Register CLI commands. Override in subclasses."""

    @hookimpl
    def cleanup(self) -> None:
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized
