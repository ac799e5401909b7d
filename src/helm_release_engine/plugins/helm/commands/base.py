"""Shared options and error handling for hre commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from helm_release_engine.integrations.kubernetes.exceptions import (
    HelmReleaseNotFoundError,
    HelmValidationError,
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
)
from helm_release_engine.plugins.helm.formatters import OutputFormat

console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

OutputOption = Annotated[
    OutputFormat,
    typer.Option(
        "--output",
        "-o",
        help="Output format: table, json, or yaml",
        case_sensitive=False,
    ),
]

NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Kubernetes namespace (defaults to config or 'default')",
    ),
]

ForceOption = Annotated[
    bool,
    typer.Option(
        "--force",
        "-f",
        help="Skip confirmation prompts",
    ),
]

ReleaseArgument = Annotated[str, typer.Argument(help="Release name")]

RepoOption = Annotated[
    str | None,
    typer.Option("--repo", help="Chart repository URL"),
]

ChartVersionOption = Annotated[
    str | None,
    typer.Option("--version", help="Chart version"),
]

ValuesFileOption = Annotated[
    Path | None,
    typer.Option(
        "--values",
        help="Values YAML file passed to the Helm job",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]

PlanOption = Annotated[
    bool,
    typer.Option("--plan", help="Print the Job and values ConfigMap manifests"),
]


# =============================================================================
# Error Handling
# =============================================================================


def handle_k8s_error(error: KubernetesError) -> None:
    """Print a Kubernetes or Helm error and exit.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, KubernetesConnectionError):
        err_console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        err_console.print(f"  {error.message}")
        if error.original_error:
            err_console.print(f"  Cause: {error.original_error}")
        err_console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(error, KubernetesAuthError):
        err_console.print("[red]Error:[/red] Authentication/authorization failed")
        err_console.print(f"  {error.message}")
        err_console.print("\n[dim]Hint: Check your credentials or RBAC permissions.[/dim]")

    elif isinstance(error, HelmReleaseNotFoundError):
        err_console.print(
            f"[red]Error:[/red] {error.message}: "
            f"release '{error.release_name}' in namespace '{error.namespace}'"
        )

    elif isinstance(error, KubernetesNotFoundError):
        err_console.print("[red]Error:[/red] Resource not found")
        err_console.print(f"  {error.message}")

    elif isinstance(error, HelmValidationError):
        err_console.print("[red]Error:[/red] Invalid request")
        err_console.print(f"  {error.message}")
        if error.field:
            err_console.print(f"  Field: {error.field}")

    elif isinstance(error, KubernetesValidationError):
        err_console.print("[red]Error:[/red] Validation failed")
        err_console.print(f"  {error.message}")
        for field, err in error.validation_errors.items():
            err_console.print(f"    - {field}: {err}")

    elif isinstance(error, KubernetesConflictError):
        err_console.print("[red]Error:[/red] Resource conflict")
        err_console.print(f"  {error.message}")

    elif isinstance(error, KubernetesTimeoutError):
        err_console.print("[red]Error:[/red] Operation timed out")
        err_console.print(f"  {error.message}")
        err_console.print("\n[dim]Hint: Try increasing the timeout with HRE_TIMEOUT.[/dim]")

    else:
        err_console.print(f"[red]Error:[/red] {error.message}")
        if error.status_code:
            err_console.print(f"  HTTP Status: {error.status_code}")

    raise typer.Exit(1)


def confirm_delete(release: str, namespace: str) -> bool:
    """Ask before deleting every stored record of a release."""
    return typer.confirm(
        f"Delete all stored records of release '{release}' in namespace '{namespace}'?",
        default=False,
    )
