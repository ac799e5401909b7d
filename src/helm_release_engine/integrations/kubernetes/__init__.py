"""Kubernetes integration - API client, storage adapter and configuration models."""

from helm_release_engine.integrations.kubernetes.client import KubernetesClient
from helm_release_engine.integrations.kubernetes.config import (
    ClusterConfig,
    HelmEnginePluginConfig,
    HelmSettings,
    KubernetesDefaultsConfig,
)
from helm_release_engine.integrations.kubernetes.exceptions import (
    HelmDecodeError,
    HelmError,
    HelmReleaseNotFoundError,
    HelmValidationError,
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
)
from helm_release_engine.integrations.kubernetes.release_storage import HelmReleaseStorage

__all__ = [
    "ClusterConfig",
    "HelmDecodeError",
    "HelmEnginePluginConfig",
    "HelmError",
    "HelmReleaseNotFoundError",
    "HelmReleaseStorage",
    "HelmSettings",
    "HelmValidationError",
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesDefaultsConfig",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesTimeoutError",
    "KubernetesValidationError",
]
