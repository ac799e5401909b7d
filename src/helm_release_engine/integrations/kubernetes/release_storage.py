"""Kubernetes storage access for Helm release records.

Lists and deletes the Secrets and ConfigMaps Helm writes for each release
revision, converting them to ``StoredRecord`` values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

from helm_release_engine.integrations.kubernetes.models.helm import RecordKind, StoredRecord

if TYPE_CHECKING:
    from helm_release_engine.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()

_RESOURCE_TYPES = {
    RecordKind.SECRET: "Secret",
    RecordKind.CONFIG_MAP: "ConfigMap",
}


class ReleaseRecordStore(Protocol):
    """Storage operations the release engine depends on."""

    def list_owned_records(self, kind: RecordKind) -> list[StoredRecord]: ...

    def list_records_in_scope(
        self,
        namespace: str,
        kind: RecordKind | None = None,
    ) -> list[StoredRecord]: ...

    def delete_record(self, namespace: str, kind: RecordKind, name: str) -> None: ...


class HelmReleaseStorage:
    """Storage collaborator backed by the CoreV1 API.

    Every call may raise a ``KubernetesError``; callers decide whether a
    failure is recoverable.
    """

    def __init__(self, client: KubernetesClient, owner_label_selector: str = "owner=helm") -> None:
        """Initialize the storage adapter.

        Args:
            client: Kubernetes API client.
            owner_label_selector: Label selector matching Helm-owned records.
        """
        self._client = client
        self._selector = owner_label_selector
        self._retry = client.make_retry_decorator()
        self._log = logger.bind(entity="helm_storage")

    def list_owned_records(self, kind: RecordKind) -> list[StoredRecord]:
        """List Helm-owned records of one kind across all namespaces.

        Args:
            kind: Physical record shape to list.

        Returns:
            Records matching the owner label selector.
        """
        self._log.debug("listing_owned_records", kind=str(kind), selector=self._selector)
        core = self._client.core_v1

        if kind == RecordKind.SECRET:
            items = self._list(
                kind,
                None,
                core.list_secret_for_all_namespaces,
                label_selector=self._selector,
                _request_timeout=self._client.timeout,
            )
        else:
            items = self._list(
                kind,
                None,
                core.list_config_map_for_all_namespaces,
                label_selector=self._selector,
                _request_timeout=self._client.timeout,
            )

        records = [self._to_record(kind, item) for item in items]
        self._log.debug("listed_owned_records", kind=str(kind), count=len(records))
        return records

    def list_records_in_scope(
        self,
        namespace: str,
        kind: RecordKind | None = None,
    ) -> list[StoredRecord]:
        """List records in one namespace without label filtering.

        Args:
            namespace: Namespace to list.
            kind: Restrict to one record shape. Both shapes when None.

        Returns:
            Records in the namespace.
        """
        kinds = [kind] if kind else [RecordKind.SECRET, RecordKind.CONFIG_MAP]
        core = self._client.core_v1
        records: list[StoredRecord] = []

        for current in kinds:
            lister = (
                core.list_namespaced_secret
                if current == RecordKind.SECRET
                else core.list_namespaced_config_map
            )
            items = self._list(
                current,
                namespace,
                lister,
                namespace=namespace,
                _request_timeout=self._client.timeout,
            )
            records.extend(self._to_record(current, item) for item in items)

        self._log.debug("listed_records_in_scope", namespace=namespace, count=len(records))
        return records

    def delete_record(self, namespace: str, kind: RecordKind, name: str) -> None:
        """Delete a single record.

        Raises:
            KubernetesError: If the API call fails.
        """
        core = self._client.core_v1
        self._log.info("deleting_record", kind=str(kind), name=name, namespace=namespace)
        try:
            if kind == RecordKind.SECRET:
                core.delete_namespaced_secret(
                    name=name, namespace=namespace, _request_timeout=self._client.timeout
                )
            else:
                core.delete_namespaced_config_map(
                    name=name, namespace=namespace, _request_timeout=self._client.timeout
                )
        except Exception as e:
            raise self._client.translate_api_exception(
                e,
                resource_type=_RESOURCE_TYPES[kind],
                resource_name=name,
                namespace=namespace,
            ) from e
        self._log.info("deleted_record", kind=str(kind), name=name, namespace=namespace)

    def _list(
        self,
        kind: RecordKind,
        namespace: str | None,
        lister: Any,
        **kwargs: Any,
    ) -> list[Any]:
        @self._retry
        def _call() -> list[Any]:
            try:
                return list(lister(**kwargs).items or [])
            except Exception as e:
                raise self._client.translate_api_exception(
                    e,
                    resource_type=_RESOURCE_TYPES[kind],
                    namespace=namespace,
                ) from e

        return _call()

    @staticmethod
    def _to_record(kind: RecordKind, obj: Any) -> StoredRecord:
        if kind == RecordKind.SECRET:
            return StoredRecord.from_secret(obj)
        return StoredRecord.from_config_map(obj)
