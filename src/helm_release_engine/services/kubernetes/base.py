"""Base manager for services backed by the Kubernetes client.

Provides client access and namespace resolution shared by the release
engine's managers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from helm_release_engine.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()


class K8sBaseManager:
    """Base class for Kubernetes-backed managers.

    Subclasses set ``_entity_name`` for structured log context.

    Example:
        >>> class ReleaseManager(K8sBaseManager):
        ...     _entity_name = "helm_release"
    """

    _entity_name: str = ""

    def __init__(self, client: KubernetesClient) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    @property
    def default_namespace(self) -> str:
        return self._client.default_namespace

    def _resolve_namespace(self, namespace: str | None) -> str:
        """Return ``namespace``, or the client's default namespace when unset."""
        return namespace or self._client.default_namespace
