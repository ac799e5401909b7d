"""Configuration models for the Helm release engine."""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator

CONFIG_DIR = Path.home() / ".config" / "hre"
CONFIG_FILE = CONFIG_DIR / "config.yaml"


class ClusterConfig(BaseModel):
    """Configuration for a single Kubernetes cluster."""

    model_config = ConfigDict(extra="forbid")

    context: str = ""
    kubeconfig: str = "~/.kube/config"
    namespace: str = "default"
    timeout: int = 300

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str) -> str:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser())


class HelmSettings(BaseModel):
    """Settings for reading Helm storage and preparing Helm jobs."""

    model_config = ConfigDict(extra="forbid")

    owner_label_selector: str = "owner=helm"
    values_mount_path: str = "/tmp/values/values.yaml"
    job_image: str = "alpine/helm:latest"
    job_ttl_seconds: int = 300

    @field_validator("values_mount_path")
    @classmethod
    def validate_values_mount_path(cls, v: str) -> str:
        """Values are mounted into the job container, so the path must be absolute."""
        path = PurePosixPath(v)
        if not path.is_absolute() or path.name == "":
            raise ValueError("values_mount_path must be an absolute file path")
        return str(path)

    @field_validator("job_ttl_seconds")
    @classmethod
    def validate_job_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("job_ttl_seconds must be positive")
        return v

    @property
    def values_mount_dir(self) -> str:
        """Directory the values ConfigMap is mounted at."""
        return str(PurePosixPath(self.values_mount_path).parent)

    @property
    def values_file_name(self) -> str:
        """ConfigMap key holding the values document."""
        return PurePosixPath(self.values_mount_path).name


class KubernetesDefaultsConfig(BaseModel):
    """Default settings for Kubernetes API calls."""

    model_config = ConfigDict(extra="forbid")

    timeout: int = 300
    retry_attempts: int = 3

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is at least one attempt."""
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v


class HelmEnginePluginConfig(BaseModel):
    """Complete Helm release engine configuration."""

    model_config = ConfigDict(extra="forbid")

    clusters: dict[str, ClusterConfig] = {}
    active_cluster: str | None = None
    defaults: KubernetesDefaultsConfig = KubernetesDefaultsConfig()
    helm: HelmSettings = HelmSettings()
    output_format: Literal["table", "json", "yaml"] = "table"

    # Env overrides that apply even when no named clusters are configured
    _kubeconfig_override: str | None = PrivateAttr(default=None)
    _namespace_override: str | None = PrivateAttr(default=None)

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> HelmEnginePluginConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            HRE_KUBECONFIG: Override kubeconfig path
            HRE_CONTEXT: Override active Kubernetes context
            HRE_NAMESPACE: Override default namespace
            HRE_TIMEOUT: Default timeout in seconds
            HRE_OUTPUT: Output format (table, json, yaml)
            HRE_OWNER_SELECTOR: Label selector for Helm-owned records
            HRE_VALUES_MOUNT_PATH: Values file path inside the Helm job
        """
        config_dict = dict(base_config) if base_config else {}
        config_dict["defaults"] = dict(config_dict.get("defaults") or {})
        config_dict["helm"] = dict(config_dict.get("helm") or {})
        config_dict.setdefault("clusters", {})

        kubeconfig_override = os.environ.get("HRE_KUBECONFIG")
        namespace_override = os.environ.get("HRE_NAMESPACE")

        if context := os.environ.get("HRE_CONTEXT"):
            config_dict["active_cluster"] = context

        if timeout := os.environ.get("HRE_TIMEOUT"):
            config_dict["defaults"]["timeout"] = int(timeout)

        if output_format := os.environ.get("HRE_OUTPUT"):
            config_dict["output_format"] = output_format

        if selector := os.environ.get("HRE_OWNER_SELECTOR"):
            config_dict["helm"]["owner_label_selector"] = selector

        if mount_path := os.environ.get("HRE_VALUES_MOUNT_PATH"):
            config_dict["helm"]["values_mount_path"] = mount_path

        instance = cls.model_validate(config_dict)

        if kubeconfig_override:
            for cluster_cfg in instance.clusters.values():
                cluster_cfg.kubeconfig = str(Path(kubeconfig_override).expanduser())
            instance._kubeconfig_override = str(Path(kubeconfig_override).expanduser())

        if namespace_override:
            for cluster_cfg in instance.clusters.values():
                cluster_cfg.namespace = namespace_override
            instance._namespace_override = namespace_override

        return instance

    def get_active_context(self) -> str | None:
        """Get the active cluster context name.

        Returns the active_cluster if set, or the context from the first
        configured cluster, or None if no clusters are configured.
        """
        if self.active_cluster:
            if cluster := self.clusters.get(self.active_cluster):
                return cluster.context or None
            return self.active_cluster
        if self.clusters:
            first = next(iter(self.clusters.values()))
            return first.context or None
        return None

    def get_active_kubeconfig(self) -> str | None:
        """Get the kubeconfig path for the active cluster, if configured."""
        if self.active_cluster and self.active_cluster in self.clusters:
            return self.clusters[self.active_cluster].kubeconfig
        return self._kubeconfig_override

    def get_active_namespace(self) -> str:
        """Get the default namespace for the active cluster."""
        if self.active_cluster and self.active_cluster in self.clusters:
            return self.clusters[self.active_cluster].namespace
        if self.clusters:
            first = next(iter(self.clusters.values()))
            return first.namespace
        return self._namespace_override or "default"

    def get_active_timeout(self) -> int:
        """Get the timeout for the active cluster."""
        if self.active_cluster and self.active_cluster in self.clusters:
            return self.clusters[self.active_cluster].timeout
        return self.defaults.timeout


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load the raw configuration dictionary from a YAML file.

    Args:
        path: Config file path. Defaults to ``~/.config/hre/config.yaml``.

    Returns:
        Parsed configuration, or an empty dict if the file does not exist.

    Raises:
        ValueError: If the file does not contain a YAML mapping.
    """
    config_path = path or CONFIG_FILE
    if not config_path.exists():
        return {}
    data = yaml.safe_load(config_path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"configuration in {config_path} must be a mapping")
    return data
