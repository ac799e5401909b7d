"""Shared pytest fixtures for helm_release_engine tests."""

from __future__ import annotations

import base64
import gzip
import json
import os
from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog
from structlog.testing import capture_logs
from typer.testing import CliRunner

from helm_release_engine.integrations.kubernetes.models.helm import (
    RELEASE_NAME_ANNOTATION,
    RELEASE_NAMESPACE_ANNOTATION,
    RecordKind,
    StoredRecord,
)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear HRE_ environment overrides for each test."""
    for key in list(os.environ.keys()):
        if key.startswith("HRE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def log_events() -> Iterator[list[dict[str, Any]]]:
    """Capture structlog events instead of printing them to stdout."""
    with capture_logs() as events:
        yield events
    structlog.reset_defaults()


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Create a mock Kubernetes client whose retry decorator is a no-op."""
    mock_client = MagicMock()
    mock_client.default_namespace = "default"
    mock_client.timeout = 30
    mock_client.make_retry_decorator.return_value = lambda f: f
    return mock_client


# =============================================================================
# Release record factories
# =============================================================================


def encode_release(document: Any) -> bytes:
    """Encode a release document the way Helm's Secret driver stores it."""
    raw = json.dumps(document).encode()
    return base64.b64encode(gzip.compress(raw))


@pytest.fixture
def release_payload() -> Callable[..., bytes]:
    """Build an encoded release payload from chart and info fields."""

    def _build(
        chart: str = "nginx",
        version: str = "15.0.0",
        app_version: str = "1.25.0",
        status: str = "deployed",
        revision: int = 1,
        last_deployed: Any = "2024-05-01T10:00:00Z",
        **extra: Any,
    ) -> bytes:
        document: dict[str, Any] = {
            "chart": {
                "metadata": {"name": chart, "version": version, "appVersion": app_version}
            },
            "info": {
                "status": status,
                "revision": revision,
                "last_deployed": last_deployed,
                "description": "Install complete",
            },
        }
        document.update(extra)
        return encode_release(document)

    return _build


@pytest.fixture
def secret_record() -> Callable[..., StoredRecord]:
    """Build a Secret-shaped record as Helm writes it."""

    def _build(
        name: str = "web",
        namespace: str = "apps",
        revision: int | str | None = 1,
        status: str | None = "deployed",
        payload: bytes | None = None,
        annotated: bool = True,
        record_name: str | None = None,
    ) -> StoredRecord:
        labels = {"name": name, "owner": "helm"}
        if revision is not None:
            labels["version"] = str(revision)
        if status is not None:
            labels["status"] = status
        annotations = (
            {RELEASE_NAME_ANNOTATION: name, RELEASE_NAMESPACE_ANNOTATION: namespace}
            if annotated
            else {}
        )
        return StoredRecord(
            kind=RecordKind.SECRET,
            name=record_name or f"sh.helm.release.v1.{name}.v{revision}",
            namespace=namespace,
            labels=labels,
            annotations=annotations,
            payload=payload,
            creation_timestamp="2024-05-01T09:59:00Z",
        )

    return _build


@pytest.fixture
def config_map_record() -> Callable[..., StoredRecord]:
    """Build a label-only ConfigMap-shaped record."""

    def _build(
        name: str = "web",
        namespace: str = "apps",
        revision: int = 1,
        status: str | None = "deployed",
        annotated: bool = True,
        record_name: str | None = None,
    ) -> StoredRecord:
        labels = {"name": name, "owner": "helm", "version": str(revision)}
        if status is not None:
            labels["status"] = status
        annotations = (
            {RELEASE_NAME_ANNOTATION: name, RELEASE_NAMESPACE_ANNOTATION: namespace}
            if annotated
            else {}
        )
        return StoredRecord(
            kind=RecordKind.CONFIG_MAP,
            name=record_name or f"{name}.v{revision}",
            namespace=namespace,
            labels=labels,
            annotations=annotations,
            creation_timestamp="2024-04-01T08:00:00Z",
        )

    return _build
