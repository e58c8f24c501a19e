from __future__ import annotations

import typer

from pubmirror.cli.commands._helpers import exit_with_error
from pubmirror.cli.context import build_context
from pubmirror.core.result import Err
from pubmirror.publish.packages import load_all_packages
from pubmirror.publish.versions import latest_version as find_latest_version
from pubmirror.publish.versions import set_all_versions


def latest_version() -> None:
    """Print the highest version among the public packages."""
    ctx = build_context()
    packages = load_all_packages(
        ctx.repo_root / ctx.config.packages.root, namespace=ctx.config.packages.namespace
    )
    if isinstance(packages, Err):
        exit_with_error(packages.error, ctx)

    latest = find_latest_version(packages.value)
    if isinstance(latest, Err):
        exit_with_error(latest.error, ctx)
    typer.echo(str(latest.value))


def set_version(
    version: str = typer.Argument(..., help="Version to set, e.g. 2.0.0-canary.1"),
    install: bool = typer.Option(True, "--install/--no-install", help="Run yarn afterwards"),
) -> None:
    """Set the version of every public package."""
    ctx = build_context()
    result = set_all_versions(
        repo_root=ctx.repo_root,
        version=version,
        config=ctx.config,
        console=ctx.console,
        install=install,
    )
    if isinstance(result, Err):
        exit_with_error(result.error, ctx)
    ctx.console.success(f"set {result.value} package(s) to {version}")
