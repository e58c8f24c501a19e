"""Publish every package in dependency order and mirror it downstream.

For each package, one at a time:

    publish -> confirm availability -> transplant -> push downstream -> cleanup

The first two steps retry on failure; anything that still fails aborts the
whole run. Cleanup of the per-package artifacts runs on every exit path.
"""

from __future__ import annotations

import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from pubmirror.core.config import Config
from pubmirror.core.result import Err, Ok, Result
from pubmirror.output.console import ConsoleProtocol, Style
from pubmirror.platform.files import remove_path
from pubmirror.publish.errors import PublishError
from pubmirror.publish.model import PackageDetails, PublishOrder, PublishSummary
from pubmirror.publish.order import topological_sort
from pubmirror.publish.packages import load_all_packages
from pubmirror.publish.npm_registry import (
    configure_registry,
    confirm_available,
    publish_command,
    publish_package,
)
from pubmirror.publish.transplant import (
    WorkPaths,
    clean_work_paths,
    push_downstream,
    transplant_package,
)
from pubmirror.registry.http import HttpClient


def resolve_publish_order(
    *, repo_root: Path, config: Config
) -> Result[PublishOrder, PublishError]:
    packages = load_all_packages(
        repo_root / config.packages.root, namespace=config.packages.namespace
    )
    if isinstance(packages, Err):
        return packages
    return topological_sort(packages.value)


def publish_one(
    package: PackageDetails,
    *,
    config: Config,
    paths: WorkPaths,
    http: HttpClient,
    console: ConsoleProtocol,
    sleep: Callable[[float], None] = time.sleep,
) -> Result[None, PublishError]:
    console.header(f"{package.name}@{package.version}")

    published = publish_package(
        package, policy=config.publish_retry, console=console, sleep=sleep
    )
    if isinstance(published, Err):
        return published

    available = confirm_available(
        package,
        registry=config.registry,
        policy=config.availability_retry,
        http=http,
        console=console,
        sleep=sleep,
    )
    if isinstance(available, Err):
        return available

    try:
        repo = transplant_package(
            package,
            registry=config.registry,
            assets=config.assets,
            paths=paths,
            console=console,
        )
        if isinstance(repo, Err):
            return repo

        pushed = push_downstream(repo.value, package, console=console)
        if isinstance(pushed, Err):
            return pushed
    finally:
        clean_work_paths(paths, package)

    console.success(f"{package.name}@{package.version} mirrored to branch {package.branch_name}")
    return Ok(None)


def _print_plan(order: PublishOrder, *, config: Config, console: ConsoleProtocol) -> None:
    for package in order:
        console.print(f"[dry-run] {package.name}@{package.version}")
        console.print(f"  {' '.join(publish_command(package))}", Style.DIM)
        url = config.registry.tarball_url(package)
        console.print(f"  poll {url}", Style.DIM)
        console.print(f"  push {config.assets.repo_url} {package.branch_name}", Style.DIM)


def publish_all(
    *,
    repo_root: Path,
    config: Config,
    http: HttpClient,
    console: ConsoleProtocol,
    work_dir: Path | None = None,
    sleep: Callable[[float], None] = time.sleep,
    dry_run: bool = False,
) -> Result[PublishSummary, PublishError]:
    """Publish all public packages under the repo's packages root.

    Args:
        repo_root: Monorepo root (yarn config commands run here).
        work_dir: Directory for tarballs, extraction and the asset clone.
            When None, a fresh temporary directory is used and removed
            afterwards; an explicit directory is left in place.
        dry_run: Print the order and planned commands without running them.

    Returns:
        Ok(PublishSummary) naming the packages published, in order, or the
        first fatal PublishError.
    """
    order = resolve_publish_order(repo_root=repo_root, config=config)
    if isinstance(order, Err):
        return order

    console.info(f"publish order: {', '.join(p.name for p in order.value) or '(none)'}")

    configured = configure_registry(
        repo_root=repo_root, registry=config.registry, console=console, dry_run=dry_run
    )
    if isinstance(configured, Err):
        return configured

    if dry_run:
        _print_plan(order.value, config=config, console=console)
        return Ok(PublishSummary(published=()))

    owns_work_dir = work_dir is None
    if work_dir is None:
        root = Path(tempfile.mkdtemp(prefix="pubmirror-"))
    else:
        root = work_dir.resolve()
        root.mkdir(parents=True, exist_ok=True)
    paths = WorkPaths(root=root, assets_dir=config.assets.dir)
    console.print(f"work dir: {root}", Style.DIM)

    published: list[str] = []
    try:
        for package in order.value:
            result = publish_one(
                package, config=config, paths=paths, http=http, console=console, sleep=sleep
            )
            if isinstance(result, Err):
                return result
            published.append(package.name)
    finally:
        if owns_work_dir:
            remove_path(root)

    return Ok(PublishSummary(published=tuple(published)))
