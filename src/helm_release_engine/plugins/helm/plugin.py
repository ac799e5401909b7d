"""Helm release plugin.

Provides the ``releases`` and ``command`` command groups on top of the
Kubernetes client, the release manager and the operation planner.
"""

from __future__ import annotations

import structlog
import typer

from helm_release_engine import __version__
from helm_release_engine.core.plugins.base import Plugin, hookimpl
from helm_release_engine.integrations.kubernetes.client import KubernetesClient
from helm_release_engine.integrations.kubernetes.config import HelmEnginePluginConfig
from helm_release_engine.plugins.helm.commands import (
    register_command_commands,
    register_release_commands,
)
from helm_release_engine.services.helm.operations import HelmOperationPlanner
from helm_release_engine.services.helm.release_manager import HelmReleaseManager

logger = structlog.get_logger()


class HelmPlugin(Plugin):
    """Helm release state plugin.

    The Kubernetes client is created on first use so ``--help`` and
    ``--version`` work without a reachable cluster.
    """

    name = "helm"
    version = __version__
    description = "Helm release state reconciliation and command synthesis"

    def __init__(self) -> None:
        super().__init__()
        self._client: KubernetesClient | None = None
        self._plugin_config: HelmEnginePluginConfig | None = None

    def on_initialize(self) -> None:
        """Parse configuration, applying HRE_* environment overrides."""
        self._plugin_config = HelmEnginePluginConfig.from_env(self._config)
        logger.debug(
            "helm_plugin_initialized",
            context=self._plugin_config.get_active_context(),
            namespace=self._plugin_config.get_active_namespace(),
        )

    @property
    def plugin_config(self) -> HelmEnginePluginConfig:
        if self._plugin_config is None:
            self._plugin_config = HelmEnginePluginConfig.from_env()
        return self._plugin_config

    def get_client(self) -> KubernetesClient:
        """Return the shared client, connecting on first call.

        Raises:
            KubernetesConnectionError: If no cluster configuration is found.
        """
        if self._client is None:
            self._client = KubernetesClient(self.plugin_config)
            logger.debug("helm_plugin_connected", context=self._client.current_context)
        return self._client

    def get_manager(self) -> HelmReleaseManager:
        return HelmReleaseManager(
            self.get_client(),
            values_mount_path=self.plugin_config.helm.values_mount_path,
        )

    def get_planner(self) -> HelmOperationPlanner:
        client = self.get_client()
        return HelmOperationPlanner(
            self.get_manager(),
            self.plugin_config.helm,
            job_namespace=client.default_namespace,
        )

    @hookimpl
    def register_commands(self, app: typer.Typer) -> None:
        """Register Helm commands with the CLI."""
        register_release_commands(app, self.get_manager)
        register_command_commands(app, self.get_planner)
        logger.debug("helm_commands_registered")

    @hookimpl
    def cleanup(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
        super().cleanup()
