"""Unit tests for Kubernetes client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from helm_release_engine.integrations.kubernetes.client import KubernetesClient
from helm_release_engine.integrations.kubernetes.config import (
    ClusterConfig,
    HelmEnginePluginConfig,
    KubernetesDefaultsConfig,
)
from helm_release_engine.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)


@pytest.mark.unit
@pytest.mark.helm
class TestKubernetesClientInitialization:
    """Test KubernetesClient initialization."""

    @patch("kubernetes.config")
    def test_init_with_default_config(self, mock_config: MagicMock) -> None:
        """Test client initialization with default config."""
        plugin_config = HelmEnginePluginConfig()
        client = KubernetesClient(plugin_config)

        assert client.config is plugin_config
        assert client._retries == 3
        mock_config.load_kube_config.assert_called_once_with(config_file=None, context=None)

    @patch("kubernetes.config")
    def test_init_with_cluster_config(self, mock_config: MagicMock) -> None:
        """Test client initialization with cluster configuration."""
        plugin_config = HelmEnginePluginConfig(
            clusters={"test": ClusterConfig(context="test-context", kubeconfig="/path/to/config")},
            active_cluster="test",
        )
        client = KubernetesClient(plugin_config)

        mock_config.load_kube_config.assert_called_once_with(
            config_file="/path/to/config",
            context="test-context",
        )
        assert client.current_context == "test-context"

    @patch("kubernetes.config")
    def test_init_fallback_to_incluster(self, mock_config: MagicMock) -> None:
        """Test client falls back to in-cluster config."""
        from kubernetes.config import ConfigException

        mock_config.load_kube_config.side_effect = ConfigException("Not found")

        client = KubernetesClient(HelmEnginePluginConfig())

        mock_config.load_incluster_config.assert_called_once()
        assert client.current_context == "in-cluster"

    @patch("kubernetes.config")
    def test_init_connection_error(self, mock_config: MagicMock) -> None:
        """Test client raises KubernetesConnectionError when config loading fails."""
        from kubernetes.config import ConfigException

        mock_config.load_kube_config.side_effect = ConfigException("No config")
        mock_config.load_incluster_config.side_effect = ConfigException("Not in cluster")

        with pytest.raises(KubernetesConnectionError) as exc_info:
            KubernetesClient(HelmEnginePluginConfig())

        assert "Cannot load Kubernetes configuration" in str(exc_info.value)


@pytest.mark.unit
@pytest.mark.helm
class TestKubernetesClientProperties:
    """Test lazy API accessors and config-derived properties."""

    @patch("kubernetes.config")
    def test_core_v1_lazy_loading(self, mock_config: MagicMock) -> None:
        """Test CoreV1Api is created once on first access."""
        client = KubernetesClient(HelmEnginePluginConfig())
        assert client._core_v1 is None

        with patch("kubernetes.client.CoreV1Api") as mock_api:
            first = client.core_v1
            second = client.core_v1

        mock_api.assert_called_once()
        assert first is second

    @patch("kubernetes.config")
    def test_close_clears_api_cache(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(HelmEnginePluginConfig())
        with patch("kubernetes.client.CoreV1Api"):
            _ = client.core_v1

        with client:
            pass

        assert client._core_v1 is None

    @patch("kubernetes.config")
    def test_default_namespace_and_timeout(self, mock_config: MagicMock) -> None:
        plugin_config = HelmEnginePluginConfig(
            clusters={"prod": ClusterConfig(namespace="apps", timeout=60)},
            active_cluster="prod",
        )
        client = KubernetesClient(plugin_config)

        assert client.default_namespace == "apps"
        assert client.timeout == 60


@pytest.mark.unit
@pytest.mark.helm
class TestTranslateApiException:
    """Test ApiException translation."""

    def _api_exception(self, status: int, reason: str = "") -> Exception:
        from kubernetes.client import ApiException

        return ApiException(status=status, reason=reason)

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, status: int) -> None:
        error = KubernetesClient.translate_api_exception(self._api_exception(status, "Forbidden"))
        assert isinstance(error, KubernetesAuthError)
        assert error.status_code == status

    def test_not_found(self) -> None:
        error = KubernetesClient.translate_api_exception(
            self._api_exception(404),
            resource_type="Secret",
            resource_name="sh.helm.release.v1.web.v1",
            namespace="apps",
        )
        assert isinstance(error, KubernetesNotFoundError)
        assert error.message == "Secret 'sh.helm.release.v1.web.v1' not found in namespace 'apps'"

    def test_conflict(self) -> None:
        error = KubernetesClient.translate_api_exception(
            self._api_exception(409), resource_type="ConfigMap", resource_name="cm"
        )
        assert isinstance(error, KubernetesConflictError)

    @pytest.mark.parametrize("status", [400, 422])
    def test_validation(self, status: int) -> None:
        error = KubernetesClient.translate_api_exception(self._api_exception(status, "Bad"))
        assert isinstance(error, KubernetesValidationError)
        assert error.message == "Bad"

    def test_other_status(self) -> None:
        error = KubernetesClient.translate_api_exception(self._api_exception(500))
        assert type(error) is KubernetesError
        assert error.status_code == 500

    def test_urllib3_error_is_connection_error(self) -> None:
        from urllib3.exceptions import MaxRetryError

        error = KubernetesClient.translate_api_exception(MaxRetryError(None, "/api"))
        assert isinstance(error, KubernetesConnectionError)

    def test_existing_kubernetes_error_returned(self) -> None:
        original = KubernetesNotFoundError()
        assert KubernetesClient.translate_api_exception(original) is original

    def test_unknown_exception_wrapped(self) -> None:
        error = KubernetesClient.translate_api_exception(RuntimeError("boom"), namespace="apps")
        assert type(error) is KubernetesError
        assert error.namespace == "apps"


@pytest.mark.unit
@pytest.mark.helm
class TestRetryDecorator:
    """Test the retry decorator built from config."""

    @patch("kubernetes.config")
    def test_retries_connection_errors(self, mock_config: MagicMock) -> None:
        plugin_config = HelmEnginePluginConfig(
            defaults=KubernetesDefaultsConfig(retry_attempts=2)
        )
        client = KubernetesClient(plugin_config)
        attempts: list[int] = []

        def flaky() -> str:
            attempts.append(1)
            if len(attempts) == 1:
                raise KubernetesConnectionError()
            return "ok"

        with patch("tenacity.nap.time.sleep"):
            result = client.make_retry_decorator()(flaky)()

        assert result == "ok"
        assert len(attempts) == 2

    @patch("kubernetes.config")
    def test_other_errors_not_retried(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(HelmEnginePluginConfig())
        attempts: list[int] = []

        def missing() -> None:
            attempts.append(1)
            raise KubernetesNotFoundError()

        with pytest.raises(KubernetesNotFoundError):
            client.make_retry_decorator()(missing)()

        assert len(attempts) == 1
