"""Reconciliation of stored Helm records into one view per release.

Helm keeps one storage object per revision, so a release with N revisions
has N records. Secret records are authoritative: for each
``(namespace, name)`` the highest revision wins, and on a revision tie a
``deployed`` record beats any other status. ConfigMap records carry labels
only and fill in a release solely when no Secret record produced one.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from helm_release_engine.integrations.kubernetes.models.helm import (
    STATUS_UNKNOWN,
    CanonicalRelease,
    RecordKind,
    StoredRecord,
)
from helm_release_engine.services.helm.decoder import try_decode_release_payload
from helm_release_engine.services.helm.metadata import (
    extract_chart_metadata,
    extract_release_info,
)

logger = structlog.get_logger()

ReleaseKey = tuple[str, str]


def is_better_candidate(candidate: CanonicalRelease, current: CanonicalRelease | None) -> bool:
    """Return True if ``candidate`` should replace ``current`` for the same key."""
    if current is None:
        return True
    if candidate.revision != current.revision:
        return candidate.revision > current.revision
    return candidate.is_deployed and not current.is_deployed


def release_from_secret(record: StoredRecord) -> CanonicalRelease | None:
    """Build a release view from a Secret record's decoded payload.

    Returns None when the record has no usable key or payload.
    """
    namespace, name = record.key
    if not name or not namespace or record.payload is None:
        return None

    snapshot = try_decode_release_payload(record.payload)
    if snapshot is None:
        logger.debug(
            "skipped_undecodable_record",
            record=record.name,
            namespace=namespace,
        )
        return None

    chart = extract_chart_metadata(snapshot)
    info = extract_release_info(snapshot, record)

    return CanonicalRelease(
        name=name,
        namespace=namespace,
        chart=chart.name,
        version=chart.version,
        app_version=chart.app_version,
        status=info.status or STATUS_UNKNOWN,
        revision=info.revision,
        updated=info.updated,
        description=info.description,
    )


def release_from_config_map(record: StoredRecord) -> CanonicalRelease | None:
    """Build a label-only release view from a ConfigMap record."""
    namespace, name = record.key
    if not name or not namespace:
        return None

    return CanonicalRelease(
        name=name,
        namespace=namespace,
        chart=record.release_name,
        version=record.labels.get("version", ""),
        status=record.status_label or STATUS_UNKNOWN,
        revision=record.revision_label,
        updated=record.creation_timestamp,
    )


class ReleaseReconciler:
    """Merges stored records into one ``CanonicalRelease`` per key.

    Stateless apart from the per-call working map; safe to share.
    """

    def reconcile(
        self,
        secrets: Iterable[StoredRecord],
        config_maps: Iterable[StoredRecord] = (),
    ) -> list[CanonicalRelease]:
        """Reconcile records of both shapes.

        Args:
            secrets: Secret-shaped records carrying release payloads.
            config_maps: ConfigMap-shaped records carrying labels only.

        Returns:
            One release per ``(namespace, name)``, in no particular order.
        """
        releases: dict[ReleaseKey, CanonicalRelease] = {}
        skipped = 0

        for record in secrets:
            if record.kind != RecordKind.SECRET:
                continue
            candidate = release_from_secret(record)
            if candidate is None:
                skipped += 1
                continue
            if is_better_candidate(candidate, releases.get(candidate.key)):
                releases[candidate.key] = candidate

        secret_keys = set(releases)
        for record in config_maps:
            if record.kind != RecordKind.CONFIG_MAP or record.key in secret_keys:
                continue
            fallback = release_from_config_map(record)
            if fallback is not None and is_better_candidate(fallback, releases.get(fallback.key)):
                releases[fallback.key] = fallback

        logger.debug(
            "reconciled_releases",
            releases=len(releases),
            skipped_records=skipped,
        )
        return list(releases.values())
