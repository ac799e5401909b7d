"""Shared fixtures for hre command tests."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
import typer

from helm_release_engine.integrations.kubernetes.models.helm import (
    CanonicalRelease,
    ChartInfo,
    DeleteReleaseResult,
)
from helm_release_engine.plugins.helm.commands import (
    register_command_commands,
    register_release_commands,
)
from helm_release_engine.services.helm.operations import HelmOperationPlanner
from helm_release_engine.services.helm.release_manager import HelmReleaseManager


@pytest.fixture
def mock_release_manager() -> MagicMock:
    """Create a mock HelmReleaseManager with default return values."""
    manager = MagicMock()
    manager.default_namespace = "default"
    manager.reconcile_releases.return_value = [
        CanonicalRelease(
            name="web",
            namespace="apps",
            chart="nginx",
            version="15.0.0",
            status="deployed",
            revision=3,
            updated="2024-05-01T10:00:00Z",
            app_version="1.25.0",
        ),
        CanonicalRelease(
            name="grafana",
            namespace="monitoring",
            chart="grafana",
            version="7.0.0",
            status="failed",
            revision=1,
            updated="",
        ),
        CanonicalRelease(
            name="api",
            namespace="apps",
            chart="api",
            version="1",
            status="unknown",
            revision=1,
            updated="2024-04-01T08:00:00Z",
        ),
    ]
    manager.delete_release.return_value = DeleteReleaseResult(
        name="web",
        namespace="apps",
        deleted=3,
        records=["sh.helm.release.v1.web.v1", "sh.helm.release.v1.web.v2", "web.v3"],
    )
    manager.resolve_chart_info.return_value = ChartInfo(
        chart_name="nginx",
        repository_url="https://charts.bitnami.com/bitnami",
    )
    return manager


@pytest.fixture
def get_release_manager(mock_release_manager: MagicMock) -> Callable[[], MagicMock]:
    """Factory function returning the mock release manager."""
    return lambda: mock_release_manager


@pytest.fixture
def releases_app(get_release_manager: Callable[[], MagicMock]) -> typer.Typer:
    """Create a Typer app with the releases commands registered."""
    test_app = typer.Typer()
    register_release_commands(test_app, get_release_manager)
    return test_app


@pytest.fixture
def mock_storage() -> MagicMock:
    """Storage collaborator with no stored records."""
    storage = MagicMock()
    storage.list_owned_records.return_value = []
    storage.list_records_in_scope.return_value = []
    return storage


@pytest.fixture
def planner(mock_k8s_client: MagicMock, mock_storage: MagicMock) -> HelmOperationPlanner:
    """A real planner over a manager with mocked storage and a fixed clock."""
    manager = HelmReleaseManager(mock_k8s_client, mock_storage)
    return HelmOperationPlanner(manager, job_namespace="ops", clock=lambda: 1714557600)


@pytest.fixture
def command_app(planner: HelmOperationPlanner) -> typer.Typer:
    """Create a Typer app with the command group registered."""
    test_app = typer.Typer()
    register_command_commands(test_app, lambda: planner)
    return test_app
