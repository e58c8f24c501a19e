"""Discover the publishable packages of a monorepo.

Every subdirectory of the packages root holding a non-private
``package.json`` becomes a PackageDetails. Only dependencies inside the
monorepo's namespace are kept; third-party dependencies do not affect the
publish order.
"""

from __future__ import annotations

import json
from pathlib import Path

from pubmirror.core.result import Err, Ok, Result
from pubmirror.core.structured import as_str_dict, get_str, get_table
from pubmirror.publish.errors import PublishError
from pubmirror.publish.model import PackageDetails, PackageRegistry
from pubmirror.publish.semver import parse_version

MANIFEST_NAME = "package.json"


def read_manifest(path: Path) -> Result[dict[str, object], PublishError]:
    try:
        data: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(PublishError(kind="invalid_input", message=f"cannot read {path}: {e}"))
    except json.JSONDecodeError as e:
        return Err(PublishError(kind="invalid_input", message=f"invalid JSON in {path}: {e}"))

    manifest = as_str_dict(data)
    if manifest is None:
        return Err(PublishError(kind="invalid_input", message=f"{path} is not a JSON object"))
    return Ok(manifest)


def load_package_details(
    package_dir: Path, *, namespace: str
) -> Result[PackageDetails | None, PublishError]:
    """Read one package directory.

    Returns:
        Ok(None) when the directory has no manifest or the package is private.
    """
    manifest_path = package_dir / MANIFEST_NAME
    if not manifest_path.is_file():
        return Ok(None)

    manifest = read_manifest(manifest_path)
    if isinstance(manifest, Err):
        return manifest
    data = manifest.value

    if data.get("private"):
        return Ok(None)

    name = get_str(data, "name")
    version = get_str(data, "version")
    if name is None or version is None:
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"{manifest_path}: missing name or version",
            )
        )
    if parse_version(version) is None:
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"{name}: invalid version {version!r}",
                hint=str(manifest_path),
            )
        )

    deps = get_table(data, "dependencies") or {}
    return Ok(
        PackageDetails(
            name=name,
            dir=package_dir,
            version=version,
            local_deps=tuple(dep for dep in deps if dep.startswith(namespace)),
        )
    )


def load_all_packages(
    packages_root: Path, *, namespace: str
) -> Result[PackageRegistry, PublishError]:
    if not packages_root.is_dir():
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"packages directory not found: {packages_root}",
            )
        )

    packages: PackageRegistry = {}
    for child in sorted(packages_root.iterdir(), key=lambda p: p.name):
        if not child.is_dir():
            continue
        details = load_package_details(child, namespace=namespace)
        if isinstance(details, Err):
            return details
        if details.value is not None:
            packages[details.value.name] = details.value
    return Ok(packages)
