"""Kubernetes and Helm release engine exceptions."""

from __future__ import annotations

from typing import Any


class KubernetesError(Exception):
    """Base exception for Kubernetes operations.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from Kubernetes API (if applicable).
        resource_type: Type of resource involved (e.g., "Secret", "ConfigMap").
        resource_name: Name of the resource involved.
        namespace: Namespace of the resource (if applicable).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code from Kubernetes API.
            resource_type: Type of resource involved.
            resource_name: Name of the resource involved.
            namespace: Namespace of the resource.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.namespace = namespace

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.resource_type and self.resource_name:
            loc = f"[{self.resource_type}/{self.resource_name}"
            if self.namespace:
                loc += f" in {self.namespace}"
            loc += "]"
            parts.append(loc)
        return " ".join(parts)


class KubernetesConnectionError(KubernetesError):
    """Exception raised when connection to a Kubernetes cluster fails.

    This includes network errors, kubeconfig issues, and unreachable API servers.
    """

    def __init__(
        self,
        message: str = "Failed to connect to Kubernetes cluster",
        original_error: Exception | None = None,
    ) -> None:
        """Initialize KubernetesConnectionError.

        Args:
            message: Human-readable error message.
            original_error: The original exception that caused this error.
        """
        super().__init__(message=message)
        self.original_error = original_error


class KubernetesAuthError(KubernetesError):
    """Exception raised when authentication or authorization fails (401/403)."""

    def __init__(
        self,
        message: str = "Kubernetes authentication/authorization failed",
        status_code: int | None = 401,
        reason: str | None = None,
    ) -> None:
        super().__init__(message=message, status_code=status_code)
        self.reason = reason


class KubernetesNotFoundError(KubernetesError):
    """Exception raised when a requested Kubernetes resource is not found."""

    def __init__(
        self,
        message: str = "Kubernetes resource not found",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesNotFoundError.

        Args:
            message: Human-readable error message.
            resource_type: Type of resource (e.g., "Secret").
            resource_name: Name of the resource.
            namespace: Namespace of the resource.
        """
        if resource_type and resource_name:
            message = f"{resource_type} '{resource_name}' not found"
            if namespace:
                message += f" in namespace '{namespace}'"
        super().__init__(
            message=message,
            status_code=404,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesValidationError(KubernetesError):
    """Exception raised when a request fails validation.

    Raised for 400/422 API responses as well as for locally rejected input.
    """

    def __init__(
        self,
        message: str = "Invalid resource specification",
        validation_errors: dict[str, Any] | None = None,
        status_code: int | None = 422,
    ) -> None:
        """Initialize KubernetesValidationError.

        Args:
            message: Human-readable error message.
            validation_errors: Specific field validation errors.
            status_code: HTTP status code (usually 400 or 422).
        """
        super().__init__(message=message, status_code=status_code)
        self.validation_errors = validation_errors or {}


class KubernetesConflictError(KubernetesError):
    """Exception raised when a resource conflict occurs (409)."""

    def __init__(
        self,
        message: str = "Resource conflict",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        if resource_type and resource_name:
            message = f"{resource_type} '{resource_name}' already exists"
            if namespace:
                message += f" in namespace '{namespace}'"
        super().__init__(
            message=message,
            status_code=409,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesTimeoutError(KubernetesError):
    """Exception raised when a Kubernetes operation times out."""

    def __init__(
        self,
        message: str = "Kubernetes operation timed out",
        timeout_seconds: int | None = None,
    ) -> None:
        if timeout_seconds:
            message = f"{message} (after {timeout_seconds}s)"
        super().__init__(message=message)
        self.timeout_seconds = timeout_seconds


# ---------------------------------------------------------------------------
# Helm release engine
# ---------------------------------------------------------------------------


class HelmError(KubernetesError):
    """Base exception for Helm release operations."""


class HelmDecodeError(HelmError):
    """Raised when a stored release payload cannot be parsed.

    Attributes:
        stage: The decoding stage that failed (always ``parse`` today, since
            the base64 and gzip stages fall back instead of failing).
    """

    def __init__(self, message: str, stage: str = "parse") -> None:
        super().__init__(message=message)
        self.stage = stage


class HelmReleaseNotFoundError(KubernetesNotFoundError):
    """Raised when no stored records could be deleted for a release."""

    def __init__(self, release_name: str, namespace: str) -> None:
        """Initialize HelmReleaseNotFoundError.

        Args:
            release_name: Name of the release that was looked up.
            namespace: Namespace that was searched.
        """
        super().__init__(message="no Helm release records found")
        self.resource_type = "HelmRelease"
        self.resource_name = release_name
        self.namespace = namespace
        self.release_name = release_name


class HelmValidationError(KubernetesValidationError):
    """Raised when an install/upgrade request contains unsafe or malformed input.

    Attributes:
        field: Name of the request field that failed validation.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            message=message,
            validation_errors={field: message} if field else None,
            status_code=400,
        )
        self.field = field


class InvalidOperationError(HelmValidationError):
    """Raised when the operation is neither ``install`` nor ``upgrade``."""

    def __init__(self, operation: str) -> None:
        super().__init__(message=f"invalid operation: {operation}", field="operation")
        self.operation = operation


class InvalidNameError(HelmValidationError):
    """Raised when a release name or namespace is not a valid Kubernetes name."""


class InvalidTokenError(HelmValidationError):
    """Raised when a chart, repo, version, or values token is rejected."""


class InvalidChartReferenceError(HelmValidationError):
    """Raised when a chart reference has no usable chart component."""


class RepoRequiredError(HelmValidationError):
    """Raised when a chart reference cannot be paired with a repository URL."""


class UnknownRepoAliasError(RepoRequiredError):
    """Raised when a ``<alias>/<chart>`` reference names an unknown alias."""

    def __init__(self, alias: str) -> None:
        super().__init__(
            message=f"unknown chart repo prefix: {alias} (set repo URL explicitly)",
            field="repo",
        )
        self.alias = alias
