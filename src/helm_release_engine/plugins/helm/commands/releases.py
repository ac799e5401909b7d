"""CLI commands for reading and deleting stored Helm releases."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict
from typing import TYPE_CHECKING

import typer

from helm_release_engine.integrations.kubernetes.exceptions import KubernetesError
from helm_release_engine.plugins.helm.commands.base import (
    ForceOption,
    NamespaceOption,
    OutputOption,
    ReleaseArgument,
    confirm_delete,
    console,
    handle_k8s_error,
)
from helm_release_engine.plugins.helm.formatters import OutputFormat, get_formatter
from helm_release_engine.services.helm.chart_resolver import derive_repo_name

if TYPE_CHECKING:
    from helm_release_engine.services.helm.release_manager import HelmReleaseManager

RELEASE_COLUMNS = [
    ("name", "Name"),
    ("namespace", "Namespace"),
    ("revision", "Revision"),
    ("status", "Status"),
    ("chart", "Chart"),
    ("version", "Version"),
    ("appVersion", "App Version"),
    ("updated", "Updated"),
]


def register_release_commands(
    app: typer.Typer,
    get_manager: Callable[[], HelmReleaseManager],
) -> None:
    """Register the ``releases`` command group."""

    releases_app = typer.Typer(
        name="releases",
        help="Inspect and delete Helm releases stored in the cluster",
        no_args_is_help=True,
    )
    app.add_typer(releases_app, name="releases")

    # -----------------------------------------------------------------
    # list
    # -----------------------------------------------------------------

    @releases_app.command("list")
    def list_releases(
        namespace: NamespaceOption = None,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """List Helm releases, one entry per release.

        Examples:
            hre releases list
            hre releases list -n monitoring -o json
        """
        try:
            releases = get_manager().reconcile_releases()
        except KubernetesError as e:
            handle_k8s_error(e)
            return

        if namespace:
            releases = [r for r in releases if r.namespace == namespace]
        releases.sort(key=lambda r: (r.namespace, r.name))
        rows = [r.to_dict() for r in releases]

        if not rows and output == OutputFormat.TABLE:
            console.print("[yellow]No releases found[/yellow]")
            return

        get_formatter(output, console).format_list(rows, RELEASE_COLUMNS, title="Helm Releases")

    # -----------------------------------------------------------------
    # delete
    # -----------------------------------------------------------------

    @releases_app.command("delete")
    def delete_release(
        release: ReleaseArgument,
        namespace: NamespaceOption = None,
        force: ForceOption = False,
    ) -> None:
        """Delete every stored record of a release.

        Only Helm's bookkeeping records are removed; the release's workload
        objects are left in place.

        Examples:
            hre releases delete web -n apps
            hre releases delete web -n apps --force
        """
        try:
            manager = get_manager()
            ns = namespace or manager.default_namespace

            if not force and not confirm_delete(release, ns):
                console.print("[yellow]Aborted[/yellow]")
                raise typer.Exit(0)

            result = manager.delete_release(ns, release)
        except KubernetesError as e:
            handle_k8s_error(e)
            return

        console.print(
            f"[green]Deleted {result.deleted} record(s) of release "
            f"'{result.name}' in namespace '{result.namespace}'[/green]"
        )

    # -----------------------------------------------------------------
    # chart-info
    # -----------------------------------------------------------------

    @releases_app.command("chart-info")
    def chart_info(
        release: ReleaseArgument,
        namespace: NamespaceOption = None,
        output: OutputOption = OutputFormat.TABLE,
    ) -> None:
        """Show the chart and repository a release was installed from.

        Examples:
            hre releases chart-info web -n apps
        """
        try:
            info = get_manager().resolve_chart_info(namespace, release)
        except KubernetesError as e:
            handle_k8s_error(e)
            return

        data = asdict(info)
        data["repository_name"] = (
            derive_repo_name(info.repository_url) if info.repository_url else ""
        )
        get_formatter(output, console).format_dict(data, title=f"Chart of {release}")
