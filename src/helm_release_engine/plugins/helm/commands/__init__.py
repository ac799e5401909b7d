"""Command groups provided by the Helm plugin."""

from helm_release_engine.plugins.helm.commands.command import register_command_commands
from helm_release_engine.plugins.helm.commands.releases import register_release_commands

__all__ = ["register_command_commands", "register_release_commands"]
