"""Preparation of Helm install and upgrade jobs.

The planner validates a request, fills in chart details for upgrades,
synthesizes the Helm argument vector and produces the manifests an external
job runner applies. Nothing here creates cluster objects.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Any

import structlog
import yaml

from helm_release_engine.integrations.kubernetes.config import HelmSettings
from helm_release_engine.integrations.kubernetes.exceptions import (
    HelmValidationError,
    InvalidTokenError,
)
from helm_release_engine.integrations.kubernetes.models.helm import (
    HelmCommandRequest,
    HelmOperation,
    HelmOperationPlan,
)
from helm_release_engine.services.helm.chart_resolver import resolves_without_repo
from helm_release_engine.services.helm.command_builder import validate_k8s_name

if TYPE_CHECKING:
    from helm_release_engine.services.helm.release_manager import HelmReleaseManager

logger = structlog.get_logger()

VALUES_VOLUME_NAME = "values"


def validate_values_yaml(values_yaml: str) -> dict[str, Any]:
    """Parse a values document, which must be a YAML mapping.

    Raises:
        InvalidTokenError: If the document is not valid YAML or not a mapping.
    """
    try:
        values = yaml.safe_load(values_yaml)
    except yaml.YAMLError as e:
        raise InvalidTokenError(f"invalid values YAML: {e}", field="values") from e
    if not isinstance(values, dict):
        raise InvalidTokenError("values must be a YAML mapping", field="values")
    return values


class HelmOperationPlanner:
    """Prepares install and upgrade plans for the Helm job runner.

    Example:
        >>> planner = HelmOperationPlanner(manager, job_namespace="ops")
        >>> plan = planner.prepare_install(request)
        >>> body = planner.build_job_manifest(plan)
    """

    def __init__(
        self,
        manager: HelmReleaseManager,
        settings: HelmSettings | None = None,
        *,
        job_namespace: str = "default",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the planner.

        Args:
            manager: Release manager used for chart lookup and commands.
            settings: Helm job settings (defaults when None).
            job_namespace: Namespace the job and values ConfigMap run in.
            clock: Source of the Unix timestamp used in generated names.
        """
        self._manager = manager
        self._settings = settings or HelmSettings()
        self._job_namespace = job_namespace
        self._clock = clock
        self._log = logger.bind(entity="helm_operation")

    @property
    def default_namespace(self) -> str:
        """Release namespace used when a request names none."""
        return self._manager.default_namespace

    def prepare_install(self, request: HelmCommandRequest) -> HelmOperationPlan:
        """Prepare an install; a chart reference is required."""
        request = replace(request, operation=HelmOperation.INSTALL.value)
        if not request.chart_name:
            raise InvalidTokenError("chartName is required", field="chartName")
        return self._prepare(HelmOperation.INSTALL, request)

    def prepare_upgrade(self, request: HelmCommandRequest) -> HelmOperationPlan:
        """Prepare an upgrade.

        A missing chart or repository is taken from the release's latest
        stored revision. The repository is not inferred for a chart that is a
        direct reference or uses a known repository alias.

        Raises:
            HelmValidationError: If no chart can be determined.
        """
        request = replace(request, operation=HelmOperation.UPGRADE.value)
        validate_k8s_name("releaseName", request.release_name)
        validate_k8s_name("namespace", request.namespace)

        needs_repo = not request.repo and not (
            request.chart_name and resolves_without_repo(request.chart_name)
        )
        if not request.chart_name or needs_repo:
            info = self._manager.resolve_chart_info(request.namespace, request.release_name)
            self._log.debug(
                "resolved_chart_from_release",
                release=request.release_name,
                chart=info.chart_name,
                repo=info.repository_url,
            )
            request = replace(
                request,
                chart_name=request.chart_name or info.chart_name,
                repo=request.repo or info.repository_url,
            )

        if not request.chart_name:
            raise HelmValidationError(
                "chart name is required for upgrade; "
                "could not determine chart from existing release",
                field="chartName",
            )
        return self._prepare(HelmOperation.UPGRADE, request)

    def _prepare(self, operation: HelmOperation, request: HelmCommandRequest) -> HelmOperationPlan:
        name = f"helm-{operation}-{request.release_name}-{int(self._clock())}"

        config_map: dict[str, Any] | None = None
        values_yaml = request.values_yaml if request.values_yaml.strip() else ""
        if values_yaml:
            validate_values_yaml(values_yaml)
            config_map = self.build_values_config_map(name, values_yaml)
        request = replace(
            request,
            values_yaml=values_yaml,
            values_config_map=name if config_map else "",
        )

        args = self._manager.synthesize_command(request)
        self._log.info(
            "prepared_helm_operation",
            operation=str(operation),
            release=request.release_name,
            namespace=request.namespace,
            job=name,
            values=config_map is not None,
        )
        return HelmOperationPlan(
            operation=operation,
            job_name=name,
            args=args,
            values_config_map=config_map,
        )

    def build_values_config_map(self, name: str, values_yaml: str) -> dict[str, Any]:
        """Build the ConfigMap body carrying the values document."""
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {"name": name, "namespace": self._job_namespace},
            "data": {self._settings.values_file_name: values_yaml},
        }

    def build_job_manifest(
        self,
        plan: HelmOperationPlan,
        service_account: str | None = None,
    ) -> dict[str, Any]:
        """Build the ``batch/v1`` Job body that runs Helm for ``plan``.

        Args:
            plan: A prepared plan.
            service_account: Service account for the job pod, if any.

        Returns:
            The Job manifest as a plain dict.
        """
        container: dict[str, Any] = {
            "name": "helm",
            "image": self._settings.job_image,
            "command": ["helm"],
            "args": list(plan.args),
        }
        pod_spec: dict[str, Any] = {
            "restartPolicy": "Never",
            "containers": [container],
        }
        if service_account:
            pod_spec["serviceAccountName"] = service_account

        if plan.values_config_map is not None:
            pod_spec["volumes"] = [
                {
                    "name": VALUES_VOLUME_NAME,
                    "configMap": {"name": plan.values_config_map["metadata"]["name"]},
                }
            ]
            container["volumeMounts"] = [
                {"name": VALUES_VOLUME_NAME, "mountPath": self._settings.values_mount_dir}
            ]

        return {
            "apiVersion": "batch/v1",
            "kind": "Job",
            "metadata": {"name": plan.job_name, "namespace": self._job_namespace},
            "spec": {
                "ttlSecondsAfterFinished": self._settings.job_ttl_seconds,
                "template": {"spec": pod_spec},
            },
        }
