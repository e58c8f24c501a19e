"""Registry-facing steps: client configuration, publish, availability polling."""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from pathlib import Path

from pubmirror.core.config import RegistryConfig, RetryPolicy
from pubmirror.core.result import Err, Ok, Result
from pubmirror.output.console import ConsoleProtocol, Style
from pubmirror.platform.process import run as run_process
from pubmirror.platform.process import run_streaming
from pubmirror.publish.errors import PublishError
from pubmirror.publish.model import PackageDetails
from pubmirror.publish.retry import RetryState, retry
from pubmirror.publish.semver import dist_tag
from pubmirror.registry.http import HttpClient

# yarn's --tolerate-republish is not honoured for prerelease versions; this is
# the message it prints instead.
ALREADY_PUBLISHED_MARKER = "You cannot publish over the previously published versions"

_YARN_CONFIG_TIMEOUT_SECONDS = 60.0
_PUBLISH_TIMEOUT_SECONDS = 10 * 60.0


def configure_registry(
    *,
    repo_root: Path,
    registry: RegistryConfig,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[None, PublishError]:
    """Point yarn at the registry and hand it the auth token, if one is set."""
    token = os.environ.get(registry.token_env, "").strip()
    cmds = [["yarn", "config", "set", "npmRegistryServer", registry.url]]
    if token:
        cmds.append(["yarn", "config", "set", "npmAuthToken", token])
    else:
        console.warning(f"{registry.token_env} not set; publishing with yarn's existing auth")

    for cmd in cmds:
        shown = cmd[:4] + (["***"] if cmd[3] == "npmAuthToken" else cmd[4:])
        console.print(" ".join(shown), Style.DIM)
        if dry_run:
            continue
        result = run_process(cmd, cwd=repo_root, timeout=_YARN_CONFIG_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(
                PublishError(
                    kind="tool_missing" if e.returncode == -1 else "publish_failed",
                    message=f"yarn config set {cmd[3]} failed",
                    hint=e.stderr.strip() or "Install yarn (berry) and retry.",
                )
            )
    return Ok(None)


def publish_command(package: PackageDetails) -> list[str]:
    return [
        "yarn",
        "npm",
        "publish",
        "--tag",
        dist_tag(package.version),
        "--tolerate-republish",
        "--access",
        "public",
    ]


def publish_once(
    package: PackageDetails, *, console: ConsoleProtocol
) -> Result[None, PublishError]:
    """Run the registry publish command once.

    A failure whose output says the version already exists counts as success.
    """
    cmd = publish_command(package)
    result = run_streaming(
        cmd,
        cwd=package.dir,
        on_line=lambda line: console.print(line, Style.DIM),
        timeout=_PUBLISH_TIMEOUT_SECONDS,
    )
    if isinstance(result, Ok):
        return Ok(None)

    e = result.error
    if ALREADY_PUBLISHED_MARKER in e.output:
        console.info(f"{package.name}@{package.version} is already published")
        return Ok(None)
    return Err(
        PublishError(
            kind="publish_failed",
            message=f"failed to publish {package.name}@{package.version}",
            hint=e.stderr.strip() or str(e),
        )
    )


def publish_package(
    package: PackageDetails,
    *,
    policy: RetryPolicy,
    console: ConsoleProtocol,
    sleep: Callable[[float], None] = time.sleep,
) -> Result[None, PublishError]:
    console.print(
        f"Publishing {package.name} with version {package.version} "
        f"under tag @{dist_tag(package.version)}"
    )

    def attempt(state: RetryState) -> Result[None, PublishError]:
        if state.attempt:
            console.warning(f"retrying publish (attempt {state.attempt + 1} of {state.total})")
        return publish_once(package, console=console)

    return retry(attempt, num_attempts=policy.attempts, delay=policy.delay_seconds, sleep=sleep)


def check_available(url: str, *, http: HttpClient) -> Result[None, PublishError]:
    """One existence check; any status >= 400 means "not yet"."""
    result = http.head(url)
    if isinstance(result, Err):
        return Err(PublishError(kind="not_available", message=f"Package not found: {result.error}"))
    if result.value >= 400:
        return Err(
            PublishError(kind="not_available", message=f"Package not found: {result.value}")
        )
    return Ok(None)


def confirm_available(
    package: PackageDetails,
    *,
    registry: RegistryConfig,
    policy: RetryPolicy,
    http: HttpClient,
    console: ConsoleProtocol,
    sleep: Callable[[float], None] = time.sleep,
) -> Result[None, PublishError]:
    """Poll the registry until the new tarball is served."""
    url = registry.tarball_url(package)

    def attempt(state: RetryState) -> Result[None, PublishError]:
        console.print(
            f"Waiting for package to be published... attempt {state.attempt} of {state.total}"
        )
        console.print(f"looking for package at url: {url}", Style.DIM)
        return check_available(url, http=http)

    result = retry(attempt, num_attempts=policy.attempts, delay=policy.delay_seconds, sleep=sleep)
    if isinstance(result, Err):
        return Err(
            PublishError(
                kind="not_available",
                message=f"{package.name}@{package.version} never appeared on the registry",
                hint=f"{result.error.message} after {policy.attempts} attempts ({url})",
            )
        )
    return result
