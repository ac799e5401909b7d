"""CLI commands that synthesize Helm install and upgrade invocations."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer

from helm_release_engine.integrations.kubernetes.exceptions import KubernetesError
from helm_release_engine.integrations.kubernetes.models.helm import (
    HelmCommandRequest,
    HelmOperation,
)
from helm_release_engine.plugins.helm.commands.base import (
    ChartVersionOption,
    NamespaceOption,
    OutputOption,
    PlanOption,
    ReleaseArgument,
    RepoOption,
    ValuesFileOption,
    console,
    handle_k8s_error,
)
from helm_release_engine.plugins.helm.formatters import OutputFormat, get_formatter

if TYPE_CHECKING:
    from helm_release_engine.services.helm.operations import HelmOperationPlanner

ChartArgument = Annotated[
    str,
    typer.Argument(help="Chart reference (alias/chart, chart with --repo, oci:// or URL)"),
]

OptionalChartArgument = Annotated[
    str | None,
    typer.Argument(help="Chart reference; inferred from the existing release when omitted"),
]


def register_command_commands(
    app: typer.Typer,
    get_planner: Callable[[], HelmOperationPlanner],
) -> None:
    """Register the ``command`` group."""

    command_app = typer.Typer(
        name="command",
        help="Synthesize validated Helm install/upgrade commands",
        no_args_is_help=True,
    )
    app.add_typer(command_app, name="command")

    def _run(
        operation: HelmOperation,
        release: str,
        chart: str | None,
        namespace: str | None,
        repo: str | None,
        version: str | None,
        values: Path | None,
        plan_only: bool,
        output: OutputFormat,
    ) -> None:
        try:
            planner = get_planner()
            request = HelmCommandRequest(
                operation=operation.value,
                release_name=release,
                namespace=namespace or planner.default_namespace,
                chart_name=chart or "",
                version=version or "",
                repo=repo or "",
                values_yaml=values.read_text() if values else "",
            )
            if operation == HelmOperation.INSTALL:
                plan = planner.prepare_install(request)
            else:
                plan = planner.prepare_upgrade(request)
        except KubernetesError as e:
            handle_k8s_error(e)
            return

        if not plan_only:
            console.print(json.dumps(plan.args), markup=False, highlight=False, soft_wrap=True)
            return

        body: dict[str, Any] = {"job": planner.build_job_manifest(plan)}
        if plan.values_config_map is not None:
            body["valuesConfigMap"] = plan.values_config_map
        fmt = OutputFormat.YAML if output == OutputFormat.TABLE else output
        get_formatter(fmt, console).format_dict(body)

    # -----------------------------------------------------------------
    # install
    # -----------------------------------------------------------------

    @command_app.command("install")
    def install(
        release: ReleaseArgument,
        chart: ChartArgument,
        namespace: NamespaceOption = None,
        repo: RepoOption = None,
        version: ChartVersionOption = None,
        values: ValuesFileOption = None,
        plan: PlanOption = False,
        output: OutputOption = OutputFormat.YAML,
    ) -> None:
        """Print the Helm arguments for installing a chart.

        Examples:
            hre command install web bitnami/nginx -n apps
            hre command install web nginx --repo https://charts.example.com -n apps
            hre command install web oci://registry.example.com/charts/web --plan
        """
        _run(HelmOperation.INSTALL, release, chart, namespace, repo, version, values, plan, output)

    # -----------------------------------------------------------------
    # upgrade
    # -----------------------------------------------------------------

    @command_app.command("upgrade")
    def upgrade(
        release: ReleaseArgument,
        chart: OptionalChartArgument = None,
        namespace: NamespaceOption = None,
        repo: RepoOption = None,
        version: ChartVersionOption = None,
        values: ValuesFileOption = None,
        plan: PlanOption = False,
        output: OutputOption = OutputFormat.YAML,
    ) -> None:
        """Print the Helm arguments for upgrading a release.

        A missing chart or repository is recovered from the release's
        latest stored revision.

        Examples:
            hre command upgrade web -n apps
            hre command upgrade web bitnami/nginx --version 15.0.0 -n apps
        """
        _run(HelmOperation.UPGRADE, release, chart, namespace, repo, version, values, plan, output)
