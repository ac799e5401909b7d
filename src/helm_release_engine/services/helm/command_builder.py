"""Validated synthesis of Helm install/upgrade argument vectors.

Every caller-supplied token is checked before it is combined, so the emitted
vector is safe to hand to ``helm`` whether or not a shell is involved.
"""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import urlparse

import structlog

from helm_release_engine.integrations.kubernetes.exceptions import (
    InvalidNameError,
    InvalidOperationError,
    InvalidTokenError,
)
from helm_release_engine.integrations.kubernetes.models.helm import (
    CommandSpec,
    HelmCommandRequest,
    HelmOperation,
)
from helm_release_engine.services.helm.chart_resolver import resolve_chart

logger = structlog.get_logger()

DEFAULT_VALUES_MOUNT_PATH = "/tmp/values/values.yaml"

DNS1123_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
DNS1123_MAX_LENGTH = 253

FORBIDDEN_CHARACTERS = frozenset("`;|&$()<>")


def contains_forbidden_chars(value: str) -> bool:
    """Return True if ``value`` holds shell metacharacters, whitespace or controls."""
    for char in value:
        if char in FORBIDDEN_CHARACTERS or char.isspace():
            return True
        if unicodedata.category(char) == "Cc":
            return True
    return False


def validate_k8s_name(field_name: str, value: str) -> None:
    """Check a DNS-1123 subdomain name.

    Raises:
        InvalidNameError: If the value is empty, too long or malformed.
    """
    if not value:
        raise InvalidNameError(f"{field_name} is required", field=field_name)
    if len(value) > DNS1123_MAX_LENGTH:
        raise InvalidNameError(f"{field_name} is too long", field=field_name)
    if not DNS1123_SUBDOMAIN.match(value):
        raise InvalidNameError(f"invalid {field_name}", field=field_name)


def validate_token(field_name: str, value: str) -> None:
    """Reject tokens that could be read as shell syntax or as a flag.

    Raises:
        InvalidTokenError: If the token is unsafe.
    """
    if contains_forbidden_chars(value):
        raise InvalidTokenError(f"invalid {field_name}", field=field_name)
    if value.startswith("-"):
        raise InvalidTokenError(f"invalid {field_name}", field=field_name)


def validate_repo_url(value: str) -> None:
    """Check that a repository is an http(s) URL with a host."""
    validate_token("repo", value)
    try:
        parsed = urlparse(value)
    except ValueError as e:
        raise InvalidTokenError("invalid repo URL", field="repo") from e
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidTokenError("invalid repo URL", field="repo")


def parse_operation(value: str) -> HelmOperation:
    """Map an operation string to ``HelmOperation``, exact match only."""
    for operation in HelmOperation:
        if value == operation.value:
            return operation
    raise InvalidOperationError(value)


def build_command_spec(
    request: HelmCommandRequest,
    values_mount_path: str = DEFAULT_VALUES_MOUNT_PATH,
) -> CommandSpec:
    """Validate a request and resolve it into a ``CommandSpec``.

    Checks run in a fixed order (operation, names, tokens, repo URL, chart
    reference) so the first failing field is the one reported.

    Args:
        request: Untrusted install/upgrade request.
        values_mount_path: Where the values file is mounted in the job pod.

    Returns:
        The validated command.

    Raises:
        HelmValidationError: A subclass naming the rejected field.
    """
    operation = parse_operation(request.operation)

    validate_k8s_name("releaseName", request.release_name)
    validate_k8s_name("namespace", request.namespace)

    if not request.chart_name:
        raise InvalidTokenError("chartName is required", field="chartName")
    validate_token("chartName", request.chart_name)
    if request.repo:
        validate_repo_url(request.repo)
    if request.version:
        validate_token("version", request.version)

    chart_argument, repository_url = resolve_chart(request.chart_name, request.repo)

    values_file = values_mount_path if request.values_yaml and request.values_config_map else ""

    spec = CommandSpec(
        operation=operation,
        release_name=request.release_name,
        namespace=request.namespace,
        chart_argument=chart_argument,
        repository_url=repository_url,
        version=request.version,
        values_file_mount=values_file,
    )
    logger.debug(
        "built_command_spec",
        operation=str(operation),
        release=request.release_name,
        namespace=request.namespace,
        chart=chart_argument,
    )
    return spec


def synthesize_command(
    request: HelmCommandRequest,
    values_mount_path: str = DEFAULT_VALUES_MOUNT_PATH,
) -> list[str]:
    """Return the Helm argument vector for ``request``, without the binary name."""
    return build_command_spec(request, values_mount_path).to_args()
