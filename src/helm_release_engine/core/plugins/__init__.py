"""Plugin system for helm_release_engine."""

from helm_release_engine.core.plugins.base import Plugin, hookimpl, hookspec
from helm_release_engine.core.plugins.manager import PluginManager

__all__ = ["Plugin", "PluginManager", "hookimpl", "hookspec"]
