"""Unit tests for K8sBaseManager."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from helm_release_engine.services.kubernetes.base import K8sBaseManager


class TestK8sBaseManager:
    """Tests for K8sBaseManager base class."""

    @pytest.mark.unit
    @pytest.mark.helm
    def test_init(self, mock_k8s_client: MagicMock) -> None:
        """Manager should initialize with client."""
        manager = K8sBaseManager(mock_k8s_client)

        assert manager._client is mock_k8s_client
        assert manager._log is not None

    @pytest.mark.unit
    @pytest.mark.helm
    def test_resolve_namespace_with_explicit_namespace(self, mock_k8s_client: MagicMock) -> None:
        """Should return explicit namespace when provided."""
        manager = K8sBaseManager(mock_k8s_client)

        assert manager._resolve_namespace("apps") == "apps"

    @pytest.mark.unit
    @pytest.mark.helm
    @pytest.mark.parametrize("namespace", [None, ""])
    def test_resolve_namespace_falls_back(
        self, mock_k8s_client: MagicMock, namespace: str | None
    ) -> None:
        """Should return the client's default namespace when unset."""
        manager = K8sBaseManager(mock_k8s_client)

        assert manager._resolve_namespace(namespace) == "default"

    @pytest.mark.unit
    @pytest.mark.helm
    def test_default_namespace_property(self, mock_k8s_client: MagicMock) -> None:
        mock_k8s_client.default_namespace = "ops"
        assert K8sBaseManager(mock_k8s_client).default_namespace == "ops"

    @pytest.mark.unit
    @pytest.mark.helm
    def test_entity_name_default(self, mock_k8s_client: MagicMock) -> None:
        """Base manager should have empty entity name."""
        assert K8sBaseManager(mock_k8s_client)._entity_name == ""

    @pytest.mark.unit
    @pytest.mark.helm
    def test_subclass_entity_name(self, mock_k8s_client: MagicMock) -> None:
        class ReleaseManager(K8sBaseManager):
            _entity_name = "helm_release"

        assert ReleaseManager(mock_k8s_client)._entity_name == "helm_release"
