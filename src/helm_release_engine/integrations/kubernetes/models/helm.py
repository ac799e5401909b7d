"""Data models for Helm release state.

Typed dataclasses for the records Helm writes into Secrets and ConfigMaps,
the reconciled release view derived from them, and the validated command
form handed to the job runner.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from helm_release_engine.integrations.kubernetes.models.base import (
    _get_annotations,
    _get_labels,
    _safe_get,
)

# Label and annotation keys written by Helm
RELEASE_NAME_LABEL = "name"
STATUS_LABEL = "status"
REVISION_LABEL = "version"
RELEASE_NAME_ANNOTATION = "meta.helm.sh/release-name"
RELEASE_NAMESPACE_ANNOTATION = "meta.helm.sh/release-namespace"

RELEASE_DATA_KEY = "release"

STATUS_DEPLOYED = "deployed"
STATUS_SUPERSEDED = "superseded"
STATUS_UNKNOWN = "unknown"

DIRECT_CHART_SCHEMES = ("oci://", "http://", "https://")

DecodedSnapshot = dict[str, Any]


class RecordKind(StrEnum):
    """Physical storage shape of a Helm record."""

    SECRET = "secret"
    CONFIG_MAP = "configmap"


class HelmOperation(StrEnum):
    """Helm operations the command synthesizer can emit."""

    INSTALL = "install"
    UPGRADE = "upgrade"


def _format_rfc3339(value: Any) -> str:
    """Render a creation timestamp the way the Kubernetes API prints it."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return str(value)


def _parse_revision(value: str | None) -> int:
    """Parse a revision label, returning 0 for absent or malformed values."""
    if not value:
        return 0
    try:
        return int(value.strip())
    except ValueError:
        return 0


@dataclass
class StoredRecord:
    """One Helm-owned object found in cluster storage.

    Secret-shaped records carry the encoded release payload; ConfigMap-shaped
    records only carry labels and annotations.
    """

    kind: RecordKind
    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    payload: bytes | None = None
    creation_timestamp: str = ""

    @property
    def release_name(self) -> str:
        """Logical release name from the ``name`` label or the Helm annotation."""
        return self.labels.get(RELEASE_NAME_LABEL) or self.annotations.get(
            RELEASE_NAME_ANNOTATION, ""
        )

    @property
    def release_namespace(self) -> str:
        """Release namespace, falling back to the Helm annotation."""
        return self.namespace or self.annotations.get(RELEASE_NAMESPACE_ANNOTATION, "")

    @property
    def key(self) -> tuple[str, str]:
        """Reconciliation identity: ``(namespace, release name)``."""
        return (self.release_namespace, self.release_name)

    @property
    def status_label(self) -> str:
        return self.labels.get(STATUS_LABEL, "")

    @property
    def revision_label(self) -> int:
        return _parse_revision(self.labels.get(REVISION_LABEL))

    @property
    def owning_release(self) -> tuple[str, str]:
        """Annotation pair ``(release-name, release-namespace)``."""
        return (
            self.annotations.get(RELEASE_NAME_ANNOTATION, ""),
            self.annotations.get(RELEASE_NAMESPACE_ANNOTATION, ""),
        )

    @classmethod
    def from_secret(cls, obj: Any) -> StoredRecord:
        """Create a record from a kubernetes ``V1Secret``.

        The API returns Secret data base64-encoded; that transport layer is
        removed here so ``payload`` holds exactly what Helm stored.
        """
        data = _safe_get(obj, "data", default={}) or {}
        raw = data.get(RELEASE_DATA_KEY)
        payload: bytes | None = None
        if raw is not None:
            encoded = raw.encode() if isinstance(raw, str) else bytes(raw)
            try:
                payload = base64.b64decode(encoded, validate=True)
            except (binascii.Error, ValueError):
                payload = encoded
        return cls(
            kind=RecordKind.SECRET,
            name=_safe_get(obj, "metadata", "name", default=""),
            namespace=_safe_get(obj, "metadata", "namespace", default=""),
            labels=_get_labels(obj),
            annotations=_get_annotations(obj),
            payload=payload,
            creation_timestamp=_format_rfc3339(
                _safe_get(obj, "metadata", "creation_timestamp")
            ),
        )

    @classmethod
    def from_config_map(cls, obj: Any) -> StoredRecord:
        """Create a record from a kubernetes ``V1ConfigMap``."""
        return cls(
            kind=RecordKind.CONFIG_MAP,
            name=_safe_get(obj, "metadata", "name", default=""),
            namespace=_safe_get(obj, "metadata", "namespace", default=""),
            labels=_get_labels(obj),
            annotations=_get_annotations(obj),
            creation_timestamp=_format_rfc3339(
                _safe_get(obj, "metadata", "creation_timestamp")
            ),
        )


@dataclass
class CanonicalRelease:
    """The reconciled, externally visible state of one release."""

    name: str
    namespace: str
    chart: str
    version: str
    status: str
    revision: int
    updated: str
    app_version: str = ""
    description: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.namespace, self.name)

    @property
    def is_deployed(self) -> bool:
        return self.status == STATUS_DEPLOYED

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the dashboard's field names."""
        data = asdict(self)
        data["appVersion"] = data.pop("app_version")
        return data


@dataclass
class ChartInfo:
    """Chart name and source repository recovered from a release."""

    chart_name: str = ""
    repository_url: str = ""


@dataclass(frozen=True)
class CommandSpec:
    """Validated, injection-safe form of an install/upgrade command."""

    operation: HelmOperation
    release_name: str
    namespace: str
    chart_argument: str
    repository_url: str = ""
    version: str = ""
    values_file_mount: str = ""

    def to_args(self) -> list[str]:
        """Emit the ordered argument vector (without the ``helm`` binary)."""
        args = [
            str(self.operation),
            self.release_name,
            self.chart_argument,
            "--namespace",
            self.namespace,
        ]
        if self.operation == HelmOperation.INSTALL:
            args.append("--create-namespace")
        if self.version:
            args.extend(["--version", self.version])
        if self.values_file_mount:
            args.extend(["-f", self.values_file_mount])
        if self.repository_url and not self.chart_argument.startswith(DIRECT_CHART_SCHEMES):
            args.extend(["--repo", self.repository_url])
        return args


@dataclass
class HelmCommandRequest:
    """Untrusted install/upgrade request as received from a caller."""

    operation: str
    release_name: str
    namespace: str
    chart_name: str = ""
    version: str = ""
    repo: str = ""
    values_yaml: str = ""
    values_config_map: str = ""


@dataclass
class DeleteReleaseResult:
    """Outcome of deleting every stored record of a release."""

    name: str
    namespace: str
    deleted: int
    records: list[str] = field(default_factory=list)


@dataclass
class HelmOperationPlan:
    """A prepared install/upgrade ready for the external job runner."""

    operation: HelmOperation
    job_name: str
    args: list[str]
    values_config_map: dict[str, Any] | None = None
