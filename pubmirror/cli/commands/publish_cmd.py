from __future__ import annotations

from pathlib import Path

import typer

from pubmirror.cli.commands._helpers import exit_with_error
from pubmirror.cli.context import build_context
from pubmirror.core.result import Err
from pubmirror.publish.sequencer import publish_all, resolve_publish_order
from pubmirror.registry.http import RealHttpClient


def order() -> None:
    """Print the packages in publish order."""
    ctx = build_context()
    result = resolve_publish_order(repo_root=ctx.repo_root, config=ctx.config)
    if isinstance(result, Err):
        exit_with_error(result.error, ctx)

    for i, package in enumerate(result.value, start=1):
        deps = ", ".join(package.local_deps) or "-"
        ctx.console.print(f"{i:>3}. {package.name}@{package.version}  (deps: {deps})")


def publish(
    work_dir: Path | None = typer.Option(
        None,
        "--work-dir",
        help="Directory for tarballs and the asset clone (default: a temporary directory)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the plan, change nothing"),
) -> None:
    """Publish every package in dependency order and mirror it to the asset repo."""
    ctx = build_context()
    result = publish_all(
        repo_root=ctx.repo_root,
        config=ctx.config,
        http=RealHttpClient(),
        console=ctx.console,
        work_dir=work_dir,
        dry_run=dry_run,
    )
    if isinstance(result, Err):
        exit_with_error(result.error, ctx)

    if not dry_run:
        ctx.console.success(f"published {len(result.value.published)} package(s)")
