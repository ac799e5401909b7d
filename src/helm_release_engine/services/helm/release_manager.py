"""Helm release manager.

Facade over the release storage adapter that lists reconciled releases,
recovers chart information for upgrades, deletes releases and synthesizes
install/upgrade commands.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from helm_release_engine.integrations.kubernetes.exceptions import (
    HelmDecodeError,
    KubernetesError,
)
from helm_release_engine.integrations.kubernetes.models.helm import (
    RELEASE_NAME_ANNOTATION,
    RELEASE_NAME_LABEL,
    CanonicalRelease,
    ChartInfo,
    DeleteReleaseResult,
    HelmCommandRequest,
    RecordKind,
    StoredRecord,
)
from helm_release_engine.integrations.kubernetes.release_storage import HelmReleaseStorage
from helm_release_engine.services.helm.command_builder import (
    DEFAULT_VALUES_MOUNT_PATH,
    synthesize_command,
)
from helm_release_engine.services.helm.decoder import decode_release_payload
from helm_release_engine.services.helm.locator import ReleaseLocator
from helm_release_engine.services.helm.metadata import extract_chart_source
from helm_release_engine.services.helm.reconciler import ReleaseReconciler
from helm_release_engine.services.kubernetes.base import K8sBaseManager

if TYPE_CHECKING:
    from helm_release_engine.integrations.kubernetes.client import KubernetesClient
    from helm_release_engine.integrations.kubernetes.release_storage import ReleaseRecordStore


class HelmReleaseManager(K8sBaseManager):
    """Manager for Helm release state stored in the cluster.

    Reads never fail on storage errors; a failed listing is logged and
    treated as empty so the caller still gets whatever could be read.
    """

    _entity_name: str = "helm_release"

    def __init__(
        self,
        client: KubernetesClient,
        storage: ReleaseRecordStore | None = None,
        *,
        values_mount_path: str = DEFAULT_VALUES_MOUNT_PATH,
    ) -> None:
        """Initialize the release manager.

        Args:
            client: Kubernetes API client.
            storage: Optional storage adapter (auto-created if None).
            values_mount_path: Values file path used in synthesized commands.
        """
        super().__init__(client)
        self._storage = storage or HelmReleaseStorage(
            client, client.config.helm.owner_label_selector
        )
        self._values_mount_path = values_mount_path
        self._reconciler = ReleaseReconciler()
        self._locator = ReleaseLocator()

    # -----------------------------------------------------------------------
    # Release listing
    # -----------------------------------------------------------------------

    def reconcile_releases(self) -> list[CanonicalRelease]:
        """List every Helm release in the cluster, one entry per release."""
        self._log.debug("listing_helm_releases")
        secrets = self._list_owned(RecordKind.SECRET)
        config_maps = self._list_owned(RecordKind.CONFIG_MAP)

        releases = self._reconciler.reconcile(secrets, config_maps)
        self._log.info("listed_helm_releases", count=len(releases))
        return releases

    def _list_owned(self, kind: RecordKind) -> list[StoredRecord]:
        try:
            return self._storage.list_owned_records(kind)
        except KubernetesError as e:
            self._log.warning("helm_record_listing_failed", kind=str(kind), error=str(e))
            return []

    # -----------------------------------------------------------------------
    # Chart information
    # -----------------------------------------------------------------------

    def resolve_chart_info(self, namespace: str | None, name: str) -> ChartInfo:
        """Recover the chart name and repository of an existing release.

        Uses the Secret record with the highest revision label whose
        release-name annotation is ``name``.

        Args:
            namespace: Release namespace (defaults to config namespace).
            name: Release name.

        Returns:
            The chart information, empty when no record matches.
        """
        ns = self._resolve_namespace(namespace)
        try:
            records = self._storage.list_records_in_scope(ns, RecordKind.SECRET)
        except KubernetesError as e:
            self._log.warning(
                "helm_record_listing_failed",
                kind=str(RecordKind.SECRET),
                namespace=ns,
                error=str(e),
            )
            return ChartInfo()

        latest: StoredRecord | None = None
        for record in records:
            if record.annotations.get(RELEASE_NAME_ANNOTATION) != name:
                continue
            if record.revision_label > (latest.revision_label if latest else 0):
                latest = record

        if latest is None or latest.payload is None:
            self._log.debug("no_release_record_for_chart_info", release=name, namespace=ns)
            return ChartInfo()

        label_name = latest.labels.get(RELEASE_NAME_LABEL, "")
        try:
            snapshot = decode_release_payload(latest.payload)
        except HelmDecodeError as e:
            self._log.debug(
                "chart_info_decode_failed",
                release=name,
                record=latest.name,
                error=e.message,
            )
            return ChartInfo(chart_name=label_name)

        info = extract_chart_source(snapshot)
        if not info.chart_name:
            info.chart_name = label_name
        return info

    # -----------------------------------------------------------------------
    # Deletion
    # -----------------------------------------------------------------------

    def delete_release(self, namespace: str | None, name: str) -> DeleteReleaseResult:
        """Delete every stored record of a release.

        Raises:
            HelmReleaseNotFoundError: If no record was deleted.
        """
        ns = self._resolve_namespace(namespace)
        self._log.info("deleting_helm_release", release=name, namespace=ns)
        return self._locator.delete(self._storage, name, ns)

    # -----------------------------------------------------------------------
    # Commands
    # -----------------------------------------------------------------------

    def synthesize_command(self, request: HelmCommandRequest) -> list[str]:
        """Validate ``request`` and return its Helm argument vector.

        Raises:
            HelmValidationError: If any field is rejected.
        """
        args = synthesize_command(request, self._values_mount_path)
        self._log.debug(
            "synthesized_helm_command",
            operation=request.operation,
            release=request.release_name,
            namespace=request.namespace,
        )
        return args
