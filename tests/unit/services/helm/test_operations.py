"""Unit tests for HelmOperationPlanner."""

from __future__ import annotations

import base64
import gzip
import json
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from helm_release_engine.integrations.kubernetes.config import HelmSettings
from helm_release_engine.integrations.kubernetes.exceptions import (
    HelmValidationError,
    InvalidNameError,
    InvalidTokenError,
    RepoRequiredError,
)
from helm_release_engine.integrations.kubernetes.models.helm import (
    ChartInfo,
    HelmCommandRequest,
    HelmOperation,
)
from helm_release_engine.services.helm.operations import (
    HelmOperationPlanner,
    validate_values_yaml,
)
from helm_release_engine.services.helm.release_manager import HelmReleaseManager

NOW = 1714557600.7
BITNAMI_URL = "https://charts.bitnami.com/bitnami"
SOURCE_LINK = "https://github.com/bitnami/charts/tree/main/bitnami/nginx"


@pytest.fixture
def mock_storage() -> MagicMock:
    storage = MagicMock()
    storage.list_records_in_scope.return_value = []
    return storage


@pytest.fixture
def manager(mock_k8s_client: MagicMock, mock_storage: MagicMock) -> HelmReleaseManager:
    return HelmReleaseManager(mock_k8s_client, mock_storage)


@pytest.fixture
def planner(manager: HelmReleaseManager) -> HelmOperationPlanner:
    return HelmOperationPlanner(manager, job_namespace="ops", clock=lambda: NOW)


def _request(**overrides: str) -> HelmCommandRequest:
    fields = {
        "operation": "",
        "release_name": "web",
        "namespace": "apps",
        "chart_name": "bitnami/nginx",
    }
    fields.update(overrides)
    return HelmCommandRequest(**fields)


# ===========================================================================
# Values documents
# ===========================================================================


@pytest.mark.unit
@pytest.mark.helm
class TestValidateValuesYaml:
    """Tests for validate_values_yaml."""

    def test_mapping(self) -> None:
        assert validate_values_yaml("replicaCount: 2\nimage:\n  tag: 1.25\n") == {
            "replicaCount": 2,
            "image": {"tag": 1.25},
        }

    @pytest.mark.parametrize("text", ["- a\n- b\n", "just a string", "42"])
    def test_non_mapping_rejected(self, text: str) -> None:
        with pytest.raises(InvalidTokenError, match="mapping"):
            validate_values_yaml(text)

    def test_invalid_yaml_rejected(self) -> None:
        with pytest.raises(InvalidTokenError) as exc_info:
            validate_values_yaml("a: [1, 2\n")
        assert exc_info.value.field == "values"


# ===========================================================================
# Install
# ===========================================================================


@pytest.mark.unit
@pytest.mark.helm
class TestPrepareInstall:
    """Tests for prepare_install."""

    def test_plan_without_values(self, planner: HelmOperationPlanner) -> None:
        plan = planner.prepare_install(_request())

        assert plan.operation == HelmOperation.INSTALL
        assert plan.job_name == "helm-install-web-1714557600"
        assert plan.values_config_map is None
        assert plan.args == [
            "install",
            "web",
            "nginx",
            "--namespace",
            "apps",
            "--create-namespace",
            "--repo",
            "https://charts.bitnami.com/bitnami",
        ]

    def test_operation_forced_to_install(self, planner: HelmOperationPlanner) -> None:
        plan = planner.prepare_install(_request(operation="upgrade"))
        assert plan.args[0] == "install"

    def test_values_config_map(self, planner: HelmOperationPlanner) -> None:
        plan = planner.prepare_install(_request(values_yaml="replicaCount: 2\n"))

        assert plan.values_config_map == {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {"name": "helm-install-web-1714557600", "namespace": "ops"},
            "data": {"values.yaml": "replicaCount: 2\n"},
        }
        assert plan.args[plan.args.index("-f") + 1] == "/tmp/values/values.yaml"

    def test_blank_values_ignored(self, planner: HelmOperationPlanner) -> None:
        plan = planner.prepare_install(_request(values_yaml="  \n"))
        assert plan.values_config_map is None
        assert "-f" not in plan.args

    def test_invalid_values_rejected(self, planner: HelmOperationPlanner) -> None:
        with pytest.raises(InvalidTokenError):
            planner.prepare_install(_request(values_yaml="- not\n- a mapping\n"))

    def test_chart_required(self, planner: HelmOperationPlanner) -> None:
        with pytest.raises(InvalidTokenError, match="chartName is required"):
            planner.prepare_install(_request(chart_name=""))

    def test_validation_errors_propagate(self, planner: HelmOperationPlanner) -> None:
        with pytest.raises(InvalidNameError):
            planner.prepare_install(_request(release_name="Web"))


# ===========================================================================
# Upgrade
# ===========================================================================


@pytest.mark.unit
@pytest.mark.helm
class TestPrepareUpgrade:
    """Tests for prepare_upgrade."""

    def test_explicit_chart_skips_lookup(
        self, planner: HelmOperationPlanner, mock_storage: MagicMock
    ) -> None:
        plan = planner.prepare_upgrade(
            _request(chart_name="nginx", repo="https://charts.example.com")
        )

        assert plan.operation == HelmOperation.UPGRADE
        assert plan.job_name == "helm-upgrade-web-1714557600"
        assert "--create-namespace" not in plan.args
        mock_storage.list_records_in_scope.assert_not_called()

    def test_chart_and_repo_inferred(self, manager: HelmReleaseManager) -> None:
        manager.resolve_chart_info = MagicMock(  # type: ignore[method-assign]
            return_value=ChartInfo("nginx", "https://charts.bitnami.com/bitnami")
        )
        planner = HelmOperationPlanner(manager, clock=lambda: NOW)

        plan = planner.prepare_upgrade(_request(chart_name=""))

        manager.resolve_chart_info.assert_called_once_with("apps", "web")
        assert plan.args == [
            "upgrade",
            "web",
            "nginx",
            "--namespace",
            "apps",
            "--repo",
            "https://charts.bitnami.com/bitnami",
        ]

    def test_explicit_chart_kept_when_repo_inferred(self, manager: HelmReleaseManager) -> None:
        manager.resolve_chart_info = MagicMock(  # type: ignore[method-assign]
            return_value=ChartInfo("other", "https://charts.example.com")
        )
        planner = HelmOperationPlanner(manager, clock=lambda: NOW)

        plan = planner.prepare_upgrade(_request(chart_name="nginx"))

        assert plan.args[2] == "nginx"
        assert plan.args[-1] == "https://charts.example.com"

    @pytest.fixture
    def stored_source_link(
        self, mock_storage: MagicMock, secret_record: Callable[..., Any]
    ) -> None:
        document = {
            "chart": {
                "metadata": {"name": "nginx", "version": "15.0.0", "sources": [SOURCE_LINK]}
            },
            "info": {"status": "deployed", "revision": 2},
        }
        payload = base64.b64encode(gzip.compress(json.dumps(document).encode()))
        mock_storage.list_records_in_scope.return_value = [
            secret_record(revision=2, payload=payload)
        ]

    @pytest.mark.usefixtures("stored_source_link")
    def test_known_alias_keeps_its_repository(self, planner: HelmOperationPlanner) -> None:
        plan = planner.prepare_upgrade(_request(chart_name="bitnami/nginx"))

        assert plan.args[-2:] == ["--repo", BITNAMI_URL]
        assert SOURCE_LINK not in plan.args

    @pytest.mark.usefixtures("stored_source_link")
    def test_source_link_not_inferred_as_repository(self, planner: HelmOperationPlanner) -> None:
        with pytest.raises(RepoRequiredError):
            planner.prepare_upgrade(_request(chart_name=""))

    @pytest.mark.parametrize(
        ("chart_name", "expected"),
        [
            ("bitnami/nginx", ["nginx", "--namespace", "apps", "--repo", BITNAMI_URL]),
            (
                "oci://registry.example.com/web",
                ["oci://registry.example.com/web", "--namespace", "apps"],
            ),
        ],
    )
    def test_self_resolving_chart_skips_repo_inference(
        self,
        manager: HelmReleaseManager,
        chart_name: str,
        expected: list[str],
    ) -> None:
        manager.resolve_chart_info = MagicMock(  # type: ignore[method-assign]
            return_value=ChartInfo("nginx", SOURCE_LINK)
        )
        planner = HelmOperationPlanner(manager, clock=lambda: NOW)

        plan = planner.prepare_upgrade(_request(chart_name=chart_name))

        manager.resolve_chart_info.assert_not_called()
        assert plan.args == ["upgrade", "web", *expected]

    def test_no_chart_found(self, planner: HelmOperationPlanner) -> None:
        with pytest.raises(HelmValidationError, match="could not determine chart") as exc_info:
            planner.prepare_upgrade(_request(chart_name=""))
        assert exc_info.value.field == "chartName"

    def test_names_validated_before_lookup(
        self, planner: HelmOperationPlanner, mock_storage: MagicMock
    ) -> None:
        with pytest.raises(InvalidNameError):
            planner.prepare_upgrade(_request(namespace="Bad_NS", chart_name=""))
        mock_storage.list_records_in_scope.assert_not_called()


# ===========================================================================
# Job manifests
# ===========================================================================


@pytest.mark.unit
@pytest.mark.helm
class TestBuildJobManifest:
    """Tests for build_job_manifest."""

    def test_manifest_without_values(self, planner: HelmOperationPlanner) -> None:
        plan = planner.prepare_install(_request())

        job = planner.build_job_manifest(plan)

        assert job["apiVersion"] == "batch/v1"
        assert job["kind"] == "Job"
        assert job["metadata"] == {"name": "helm-install-web-1714557600", "namespace": "ops"}
        assert job["spec"]["ttlSecondsAfterFinished"] == 300
        pod = job["spec"]["template"]["spec"]
        assert pod["restartPolicy"] == "Never"
        assert "volumes" not in pod
        assert "serviceAccountName" not in pod
        container = pod["containers"][0]
        assert container["image"] == "alpine/helm:latest"
        assert container["command"] == ["helm"]
        assert container["args"] == plan.args

    def test_manifest_mounts_values(self, manager: HelmReleaseManager) -> None:
        settings = HelmSettings(values_mount_path="/values/custom.yaml", job_image="helm:3")
        planner = HelmOperationPlanner(
            manager, settings, job_namespace="ops", clock=lambda: NOW
        )
        plan = planner.prepare_install(_request(values_yaml="a: 1"))

        job = planner.build_job_manifest(plan, service_account="helm-runner")

        pod = job["spec"]["template"]["spec"]
        assert pod["serviceAccountName"] == "helm-runner"
        assert pod["volumes"] == [
            {"name": "values", "configMap": {"name": "helm-install-web-1714557600"}}
        ]
        container = pod["containers"][0]
        assert container["image"] == "helm:3"
        assert container["volumeMounts"] == [{"name": "values", "mountPath": "/values"}]
        assert plan.values_config_map is not None
        assert plan.values_config_map["data"] == {"custom.yaml": "a: 1"}

    def test_default_namespace_delegates_to_manager(
        self, planner: HelmOperationPlanner
    ) -> None:
        assert planner.default_namespace == "default"
