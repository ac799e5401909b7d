"""Plugin manager for loading built-in and third-party hre plugins."""

from __future__ import annotations

import importlib.metadata
from typing import TYPE_CHECKING, Any

import pluggy
import structlog

from helm_release_engine.core.plugins.base import PROJECT_NAME, Plugin, _PluginSpec

if TYPE_CHECKING:
    import typer

logger = structlog.get_logger()


class PluginManager:
    """Registers plugins and drives their lifecycle hooks.

    Built-in plugins are registered directly with ``register_plugin``.
    Additional plugins are discovered from the ``helm_release_engine.plugins``
    entry point group.
    """

    ENTRY_POINT_GROUP = f"{PROJECT_NAME}.plugins"

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(_PluginSpec)
        self._plugins: dict[str, Plugin] = {}

    def register_plugin(self, plugin: Plugin) -> None:
        """Register a plugin instance, ignoring repeated registrations."""
        if plugin.name in self._plugins:
            logger.debug("plugin_already_registered", name=plugin.name)
            return
        self._pm.register(plugin, name=plugin.name)
        self._plugins[plugin.name] = plugin
        logger.debug("registered_plugin", name=plugin.name, version=plugin.version)

    def discover_plugins(self) -> list[str]:
        """Return the names of plugins advertised through entry points."""
        return [ep.name for ep in importlib.metadata.entry_points(group=self.ENTRY_POINT_GROUP)]

    def load_plugin(self, name: str) -> bool:
        """Load and register an entry point plugin by name.

        Returns:
            True if the plugin is registered after the call.
        """
        if name in self._plugins:
            return True

        for ep in importlib.metadata.entry_points(group=self.ENTRY_POINT_GROUP):
            if ep.name != name:
                continue
            try:
                plugin_class = ep.load()
                plugin = plugin_class() if isinstance(plugin_class, type) else plugin_class
            except (ImportError, AttributeError, ValueError) as e:
                logger.error("plugin_load_failed", name=name, error=str(e))
                return False
            self.register_plugin(plugin)
            return True

        logger.warning("plugin_not_found", name=name)
        return False

    def load_all(self) -> None:
        """Load every discovered entry point plugin."""
        for name in self.discover_plugins():
            self.load_plugin(name)

    def initialize_all(self, config: dict[str, Any]) -> None:
        """Initialize plugins with their ``plugins.<name>`` config section.

        The whole config mapping is used for a plugin that has no section of
        its own, so a flat config file works for the built-in plugin.
        """
        sections = config.get("plugins") or {}
        for name, plugin in self._plugins.items():
            plugin_config = sections.get(name)
            if plugin_config is None:
                plugin_config = {k: v for k, v in config.items() if k != "plugins"}
            plugin.initialize(plugin_config)
            logger.debug("initialized_plugin", name=name)

    def register_commands(self, app: typer.Typer) -> None:
        """Let every plugin attach its commands to ``app``."""
        self._pm.hook.register_commands(app=app)

    def cleanup_all(self) -> None:
        self._pm.hook.cleanup()

    def list_plugins(self) -> list[dict[str, Any]]:
        """List registered plugins with their metadata."""
        return [
            {
                "name": p.name,
                "version": p.version,
                "description": p.description,
                "initialized": p.is_initialized,
            }
            for p in self._plugins.values()
        ]
