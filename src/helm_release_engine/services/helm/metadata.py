"""Extraction of chart and run metadata from decoded release snapshots.

Snapshots come from JSON written by many Helm versions, so every field is
optional and any node may have an unexpected type. Lookups never raise; a
missing or mistyped value yields an empty string (or 0 for revisions).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from helm_release_engine.integrations.kubernetes.models.helm import (
    STATUS_SUPERSEDED,
    ChartInfo,
    DecodedSnapshot,
)

if TYPE_CHECKING:
    from helm_release_engine.integrations.kubernetes.models.helm import StoredRecord

_URL_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class ChartMetadata:
    """Chart identity taken from ``chart.metadata``."""

    name: str = ""
    version: str = ""
    app_version: str = ""


@dataclass(frozen=True)
class ReleaseInfo:
    """Run information for one release revision."""

    status: str = ""
    revision: int = 0
    updated: str = ""
    description: str = ""


def _mapping(node: Any, key: str) -> dict[str, Any]:
    value = node.get(key) if isinstance(node, dict) else None
    return value if isinstance(value, dict) else {}


def _string(node: dict[str, Any], key: str) -> str:
    value = node.get(key)
    return value if isinstance(value, str) else ""


def _integer(node: dict[str, Any], key: str) -> int:
    value = node.get(key)
    # bool is an int subclass but never a revision
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def extract_chart_metadata(snapshot: DecodedSnapshot) -> ChartMetadata:
    """Pull chart name, version and app version out of a snapshot."""
    metadata = _mapping(_mapping(snapshot, "chart"), "metadata")
    return ChartMetadata(
        name=_string(metadata, "name"),
        version=_string(metadata, "version"),
        app_version=_string(metadata, "appVersion"),
    )


def extract_last_deployed(info: dict[str, Any]) -> str:
    """Read ``last_deployed`` as either a plain string or ``{"Time": ...}``."""
    value = info.get("last_deployed")
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return _string(value, "Time")
    return ""


def extract_release_info(snapshot: DecodedSnapshot, record: StoredRecord) -> ReleaseInfo:
    """Combine a record's labels with the snapshot's ``info`` block.

    Labels are read first. The decoded ``info.status`` replaces the label
    only when the label is empty or ``superseded``, since labels on
    superseded records lag behind the stored release. ``info.revision`` is
    used only when the label gives no revision.

    Args:
        snapshot: Decoded release document.
        record: The stored record the snapshot was decoded from.

    Returns:
        Status, revision, last-deployed time and description.
    """
    status = record.status_label
    revision = record.revision_label
    info = _mapping(snapshot, "info")

    if status in ("", STATUS_SUPERSEDED):
        status = _string(info, "status") or status
    if revision == 0:
        revision = _integer(info, "revision")

    return ReleaseInfo(
        status=status,
        revision=revision,
        updated=extract_last_deployed(info),
        description=_string(info, "description"),
    )


def extract_chart_source(snapshot: DecodedSnapshot) -> ChartInfo:
    """Find the chart name and the repository it was installed from.

    The repository is ``chart.metadata.repository`` when set, otherwise the
    first HTTP(S) entry of ``chart.sources``. ``chart.metadata.sources`` holds source code
    links and is ignored.
    """
    chart = _mapping(snapshot, "chart")
    metadata = _mapping(chart, "metadata")
    repository = _string(metadata, "repository")

    sources = chart.get("sources")
    if not repository and isinstance(sources, list):
        repository = next(
            (s for s in sources if isinstance(s, str) and s.startswith(_URL_SCHEMES)),
            "",
        )

    return ChartInfo(chart_name=_string(metadata, "name"), repository_url=repository)
