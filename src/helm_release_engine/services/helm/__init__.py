"""Helm release state services.

Decoding, reconciliation, location, chart resolution and command synthesis
for releases stored by Helm in Kubernetes Secrets and ConfigMaps.
"""

from helm_release_engine.services.helm.chart_resolver import (
    KNOWN_REPOSITORIES,
    derive_repo_name,
    resolve_chart,
)
from helm_release_engine.services.helm.command_builder import (
    build_command_spec,
    synthesize_command,
)
from helm_release_engine.services.helm.decoder import (
    decode_release_payload,
    try_decode_release_payload,
)
from helm_release_engine.services.helm.locator import ReleaseLocator
from helm_release_engine.services.helm.operations import HelmOperationPlanner
from helm_release_engine.services.helm.reconciler import ReleaseReconciler
from helm_release_engine.services.helm.release_manager import HelmReleaseManager

__all__ = [
    "KNOWN_REPOSITORIES",
    "HelmOperationPlanner",
    "HelmReleaseManager",
    "ReleaseLocator",
    "ReleaseReconciler",
    "build_command_spec",
    "decode_release_payload",
    "derive_repo_name",
    "resolve_chart",
    "synthesize_command",
    "try_decode_release_payload",
]
