"""Locating and deleting every stored record of a release."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from helm_release_engine.integrations.kubernetes.exceptions import (
    HelmReleaseNotFoundError,
    KubernetesError,
)
from helm_release_engine.integrations.kubernetes.models.helm import (
    DeleteReleaseResult,
    RecordKind,
    StoredRecord,
)

if TYPE_CHECKING:
    from helm_release_engine.integrations.kubernetes.release_storage import ReleaseRecordStore

logger = structlog.get_logger()

# Helm v3 Secret driver names records sh.helm.release.v1.<release>.v<revision>
LEGACY_RECORD_PREFIX = "sh.helm.release.v1"


def matches_legacy_name(identifier: str, release_name: str) -> bool:
    """Check an identifier against ``<prefix>.<release>.v<revision>``.

    The fixed-length prefix is compared and must be followed by a revision
    digit, so a release named ``web.v2`` is not taken for a revision of
    ``web``.
    """
    if len(identifier) <= len(release_name):
        return False
    prefix = f"{LEGACY_RECORD_PREFIX}.{release_name}.v"
    if identifier[: len(prefix)] != prefix:
        return False
    first = identifier[len(prefix) : len(prefix) + 1]
    return first.isascii() and first.isdigit()


def record_belongs_to_release(record: StoredRecord, name: str, namespace: str) -> bool:
    """Return True if ``record`` is part of release ``name`` in ``namespace``.

    Both shapes match on the owning-release annotation pair. Secret records
    also match on the legacy naming convention.
    """
    if record.owning_release == (name, namespace):
        return True
    return record.kind == RecordKind.SECRET and matches_legacy_name(record.name, name)


class ReleaseLocator:
    """Finds and removes the stored records belonging to one release."""

    def find(
        self,
        records: Iterable[StoredRecord],
        name: str,
        namespace: str,
    ) -> list[StoredRecord]:
        """Filter ``records`` down to those belonging to the release."""
        return [r for r in records if record_belongs_to_release(r, name, namespace)]

    def delete(
        self,
        storage: ReleaseRecordStore,
        name: str,
        namespace: str,
    ) -> DeleteReleaseResult:
        """Delete every record of a release across both storage shapes.

        A failed listing is treated as an empty result and a failed delete
        is skipped, so one stuck object does not block the rest.

        Args:
            storage: Storage collaborator.
            name: Release name.
            namespace: Release namespace.

        Returns:
            The count and identifiers of records confirmed deleted.

        Raises:
            HelmReleaseNotFoundError: If nothing was deleted.
        """
        log = logger.bind(release=name, namespace=namespace)
        deleted: list[str] = []

        for kind in (RecordKind.SECRET, RecordKind.CONFIG_MAP):
            try:
                records = storage.list_records_in_scope(namespace, kind)
            except KubernetesError as e:
                log.warning("record_listing_failed", kind=str(kind), error=str(e))
                continue

            for record in self.find(records, name, namespace):
                try:
                    storage.delete_record(namespace, record.kind, record.name)
                except KubernetesError as e:
                    log.warning(
                        "record_delete_failed",
                        kind=str(record.kind),
                        record=record.name,
                        error=str(e),
                    )
                    continue
                deleted.append(record.name)

        if not deleted:
            raise HelmReleaseNotFoundError(name, namespace)

        log.info("deleted_release_records", count=len(deleted))
        return DeleteReleaseResult(
            name=name,
            namespace=namespace,
            deleted=len(deleted),
            records=deleted,
        )
