"""Resolution of user chart references into Helm chart arguments.

A chart reference is either a direct artifact reference (``oci://``,
``http(s)://``), a bare chart name paired with an explicit repository URL,
or ``<alias>/<chart>`` where the alias is one of a few well-known public
repositories. References are never resolved by searching every known
repository for a matching chart name.
"""

from __future__ import annotations

from helm_release_engine.integrations.kubernetes.exceptions import (
    InvalidChartReferenceError,
    RepoRequiredError,
    UnknownRepoAliasError,
)
from helm_release_engine.integrations.kubernetes.models.helm import DIRECT_CHART_SCHEMES

KNOWN_REPOSITORIES: dict[str, str] = {
    "prometheus-community": "https://prometheus-community.github.io/helm-charts",
    "bitnami": "https://charts.bitnami.com/bitnami",
    "ingress-nginx": "https://kubernetes.github.io/ingress-nginx",
    "stable": "https://charts.helm.sh/stable",
}

MAX_REPO_NAME_LENGTH = 50


def is_direct_chart_reference(chart_ref: str) -> bool:
    """Return True for references Helm can fetch without ``--repo``."""
    return chart_ref.startswith(DIRECT_CHART_SCHEMES)


def lookup_repository(alias: str) -> str | None:
    """Case-insensitive lookup of a well-known repository alias."""
    wanted = alias.lower()
    for name, url in KNOWN_REPOSITORIES.items():
        if name.lower() == wanted:
            return url
    return None


def resolves_without_repo(chart_ref: str) -> bool:
    """Return True if ``chart_ref`` is direct or uses a known repository alias."""
    if is_direct_chart_reference(chart_ref):
        return True
    parts = chart_ref.split("/")
    return len(parts) == 2 and bool(parts[1]) and lookup_repository(parts[0]) is not None


def resolve_chart(chart_ref: str, repo_url: str = "") -> tuple[str, str]:
    """Turn a chart reference and optional repo URL into Helm arguments.

    Args:
        chart_ref: User-supplied chart reference.
        repo_url: Optional repository URL.

    Returns:
        ``(chart_argument, repository_url)``. The URL is empty for direct
        references.

    Raises:
        RepoRequiredError: No URL was given and the reference has no alias.
        UnknownRepoAliasError: The alias is not a known repository.
        InvalidChartReferenceError: The chart component is empty.

    Example:
        >>> resolve_chart("bitnami/nginx")
        ('nginx', 'https://charts.bitnami.com/bitnami')
    """
    if is_direct_chart_reference(chart_ref):
        return chart_ref, ""

    if repo_url:
        chart = chart_ref.rsplit("/", 1)[-1]
        if not chart:
            raise InvalidChartReferenceError("invalid chartName", field="chartName")
        return chart, repo_url

    parts = chart_ref.split("/")
    if len(parts) != 2:
        raise RepoRequiredError(
            "repo is required unless chartName is a direct URL/OCI ref "
            "or uses a known repo prefix (e.g. bitnami/<chart>)",
            field="repo",
        )

    alias, chart = parts
    if not chart:
        raise InvalidChartReferenceError("invalid chartName", field="chartName")

    url = lookup_repository(alias)
    if url is None:
        raise UnknownRepoAliasError(alias)
    return chart, url


def derive_repo_name(repo_url: str) -> str:
    """Derive a local repository name for a chart repository URL."""
    lowered = repo_url.lower()

    for alias in ("prometheus-community", "bitnami"):
        if alias in lowered:
            return alias
    if "kubernetes.github.io" in lowered:
        if "ingress-nginx" in lowered:
            return "ingress-nginx"
        segments = [s for s in repo_url.strip("/").split("/") if s]
        return segments[-1] if segments else "kubernetes"
    if "stable" in lowered:
        return "stable"

    name = repo_url.replace("https://", "").replace("http://", "").replace(".github.io", "")
    segments = [s for s in name.strip("/").split("/") if s]
    name = segments[-1] if segments else ""
    name = name.replace(".", "-")[:MAX_REPO_NAME_LENGTH]
    return name or "temp-repo"
