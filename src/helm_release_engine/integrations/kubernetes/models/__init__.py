"""Data models for Helm release storage and commands."""

from helm_release_engine.integrations.kubernetes.models.helm import (
    CanonicalRelease,
    ChartInfo,
    CommandSpec,
    DecodedSnapshot,
    DeleteReleaseResult,
    HelmCommandRequest,
    HelmOperation,
    HelmOperationPlan,
    RecordKind,
    StoredRecord,
)

__all__ = [
    "CanonicalRelease",
    "ChartInfo",
    "CommandSpec",
    "DecodedSnapshot",
    "DeleteReleaseResult",
    "HelmCommandRequest",
    "HelmOperation",
    "HelmOperationPlan",
    "RecordKind",
    "StoredRecord",
]
