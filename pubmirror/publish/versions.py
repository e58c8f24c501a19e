"""Version maintenance across every public package."""

from __future__ import annotations

import json
from pathlib import Path

from pubmirror.core.config import Config
from pubmirror.core.result import Err, Ok, Result
from pubmirror.output.console import ConsoleProtocol, Style
from pubmirror.platform.files import atomic_write_text
from pubmirror.platform.process import run as run_process
from pubmirror.publish.errors import PublishError
from pubmirror.publish.model import PackageRegistry
from pubmirror.publish.packages import MANIFEST_NAME, load_all_packages, read_manifest
from pubmirror.publish.semver import SemVer, parse_version

LERNA_FILE = "lerna.json"
_INSTALL_TIMEOUT_SECONDS = 15 * 60.0


def latest_version(packages: PackageRegistry) -> Result[SemVer, PublishError]:
    """Highest version among ``packages`` by semver precedence."""
    versions: list[SemVer] = []
    for details in packages.values():
        parsed = parse_version(details.version)
        if parsed is None:
            return Err(
                PublishError(
                    kind="version_failed",
                    message=f"{details.name}: invalid version {details.version!r}",
                )
            )
        versions.append(parsed)

    if not versions:
        return Err(PublishError(kind="version_failed", message="Could not find latest version"))
    return Ok(max(versions, key=lambda v: v.sort_key))


def _dump_json(data: object) -> str:
    return json.dumps(data, indent="\t", ensure_ascii=False) + "\n"


def _set_json_version(path: Path, version: str) -> Result[None, PublishError]:
    manifest = read_manifest(path)
    if isinstance(manifest, Err):
        return manifest
    data = manifest.value
    data["version"] = version
    try:
        atomic_write_text(path, _dump_json(data))
    except OSError as e:
        return Err(PublishError(kind="version_failed", message=f"cannot write {path}: {e}"))
    return Ok(None)


def set_all_versions(
    *,
    repo_root: Path,
    version: str,
    config: Config,
    console: ConsoleProtocol,
    install: bool = True,
) -> Result[int, PublishError]:
    """Set ``version`` on every public package, then reinstall.

    Also rewrites the configured ``export const version`` source files and the
    ``lerna.json`` version, when that file exists.

    Returns:
        Ok with the number of manifests updated.
    """
    if parse_version(version) is None:
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"invalid version: {version!r}",
                hint="Expected a semantic version such as 2.0.0 or 2.0.0-canary.1",
            )
        )

    packages = load_all_packages(
        repo_root / config.packages.root, namespace=config.packages.namespace
    )
    if isinstance(packages, Err):
        return packages

    for details in packages.value.values():
        updated = _set_json_version(details.dir / MANIFEST_NAME, version)
        if isinstance(updated, Err):
            return updated
        console.print(f"{details.name} -> {version}", Style.DIM)

        version_file = config.version_files.get(details.name)
        if version_file is not None:
            target = details.dir / version_file
            try:
                atomic_write_text(target, f"export const version = '{version}'\n")
            except OSError as e:
                return Err(
                    PublishError(kind="version_failed", message=f"cannot write {target}: {e}")
                )

    lerna = repo_root / LERNA_FILE
    if lerna.is_file():
        updated = _set_json_version(lerna, version)
        if isinstance(updated, Err):
            return updated

    if install:
        console.print("yarn", Style.DIM)
        result = run_process(["yarn"], cwd=repo_root, timeout=_INSTALL_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(
                PublishError(
                    kind="version_failed",
                    message="yarn install failed after setting versions",
                    hint=e.stderr.strip() or str(e),
                )
            )

    return Ok(len(packages.value))
