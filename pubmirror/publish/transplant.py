"""Mirror a published tarball into the downstream asset repository.

Per package, inside the run's work directory:

    <work>/<unscoped>-<version>.tgz   downloaded from the registry
    <work>/package/                   extracted tarball contents
    <work>/<assets dir>/              fresh clone of the asset repository

The extracted ``package/`` tree is copied over the clone, committed on a
``<unscoped>-<version>`` branch and force-pushed.
"""

from __future__ import annotations

import contextlib
import os
import shlex
import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from pubmirror.core.config import AssetsConfig, RegistryConfig
from pubmirror.core.result import Err, Ok, Result
from pubmirror.git.repository import GitError, Repository
from pubmirror.output.console import ConsoleProtocol, Style
from pubmirror.platform.files import copy_tree, remove_path
from pubmirror.platform.process import run as run_process
from pubmirror.publish.errors import PublishError
from pubmirror.publish.model import PackageDetails

_DOWNLOAD_TIMEOUT_SECONDS = 5 * 60.0

# npm tarballs keep everything under this top-level directory.
TARBALL_ROOT = "package"


@dataclass(frozen=True, slots=True)
class WorkPaths:
    root: Path
    assets_dir: str

    @property
    def extracted(self) -> Path:
        return self.root / TARBALL_ROOT

    @property
    def clone(self) -> Path:
        return self.root / self.assets_dir

    def tarball(self, package: PackageDetails) -> Path:
        return self.root / package.tarball_name

    def for_package(self, package: PackageDetails) -> tuple[Path, ...]:
        return (self.tarball(package), self.clone, self.extracted)


def clean_work_paths(paths: WorkPaths, package: PackageDetails) -> None:
    """Remove the tarball, clone and extracted tree; absence is fine."""
    for path in paths.for_package(package):
        remove_path(path)


def download_tarball(
    url: str, *, dest_dir: Path, console: ConsoleProtocol
) -> Result[None, PublishError]:
    cmd = ["curl", "--fail", "--silent", "--show-error", "-O", url]
    console.print(" ".join(cmd), Style.DIM)
    result = run_process(cmd, cwd=dest_dir, timeout=_DOWNLOAD_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        e = result.error
        return Err(
            PublishError(
                kind="download_failed",
                message=f"failed to download {url}",
                hint=e.stderr.strip() or str(e),
            )
        )
    return Ok(None)


def _safe_member_path(name: str) -> Path | None:
    normalized = name.replace("\\", "/")
    if normalized.startswith("/"):
        return None
    parts = PurePosixPath(normalized).parts
    if not parts or any(part in {"", ".", ".."} for part in parts):
        return None
    return Path(*parts)


def extract_tarball(archive: Path, dest: Path) -> Result[int, PublishError]:
    """Extract the regular files of a .tgz under ``dest``.

    Absolute paths, ``..`` components, links and device entries are skipped.

    Returns:
        Ok with the number of files written.
    """
    files_count = 0
    try:
        dest.mkdir(parents=True, exist_ok=True)
        dest_root = dest.resolve()
        with tarfile.open(archive, "r:gz") as tar:
            for member in tar.getmembers():
                if not member.isreg():
                    continue
                rel = _safe_member_path(member.name)
                if rel is None:
                    continue
                target = dest / rel
                if not target.resolve().is_relative_to(dest_root):
                    continue

                src = tar.extractfile(member)
                if src is None:
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with src, open(target, "wb") as out:
                    shutil.copyfileobj(src, out)

                mode = member.mode & 0o777
                if mode:
                    with contextlib.suppress(OSError):
                        os.chmod(target, mode)
                files_count += 1
    except tarfile.TarError as e:
        return Err(PublishError(kind="extract_failed", message=f"cannot extract {archive}: {e}"))
    except OSError as e:
        return Err(
            PublishError(kind="extract_failed", message=f"IO error extracting {archive}: {e}")
        )

    return Ok(files_count)


def transplant_package(
    package: PackageDetails,
    *,
    registry: RegistryConfig,
    assets: AssetsConfig,
    paths: WorkPaths,
    console: ConsoleProtocol,
) -> Result[Repository, PublishError]:
    """Download, clone, extract and copy; returns the populated clone."""
    clean_work_paths(paths, package)

    url = registry.tarball_url(package)
    downloaded = download_tarball(url, dest_dir=paths.root, console=console)
    if isinstance(downloaded, Err):
        return downloaded

    console.print(f"git clone {assets.repo_url} {assets.dir}", Style.DIM)
    cloned = Repository.clone(assets.repo_url, paths.clone)
    if isinstance(cloned, Err):
        return Err(_git_failure(cloned.error, f"failed to clone {assets.repo_url}"))
    repo = cloned.value
    if not repo.exists():
        return Err(
            PublishError(kind="git_failed", message=f"clone left no git repository at {repo.path}")
        )

    extracted = extract_tarball(paths.tarball(package), paths.root)
    if isinstance(extracted, Err):
        return extracted
    if not paths.extracted.is_dir():
        return Err(
            PublishError(
                kind="extract_failed",
                message=f"{package.tarball_name} has no {TARBALL_ROOT}/ directory",
            )
        )
    console.print(f"extracted {extracted.value} files", Style.DIM)

    try:
        copy_tree(paths.extracted, repo.path)
    except OSError as e:
        return Err(
            PublishError(
                kind="copy_failed",
                message=f"failed to copy {paths.extracted} into {repo.path}",
                hint=str(e),
            )
        )
    return Ok(repo)


def push_downstream(
    repo: Repository, package: PackageDetails, *, console: ConsoleProtocol
) -> Result[None, PublishError]:
    """Commit the copied package on its own branch and force-push it."""
    branch = package.branch_name
    message = f"Publish {package.unscoped_name}@{package.version}"

    for cmd in (
        ["git", "checkout", "-b", branch],
        ["git", "add", "."],
        ["git", "commit", "-m", message],
        ["git", "push", "-f", "-u", "origin", branch],
    ):
        console.print(shlex.join(cmd), Style.DIM)

    steps = (
        lambda: repo.checkout_new_branch(branch),
        repo.add_all,
        lambda: repo.commit(message),
        lambda: repo.push(branch, force=True),
    )
    for step in steps:
        result = step()
        if isinstance(result, Err):
            failed = result.error
            return Err(_git_failure(failed, f"git {failed.command} failed ({branch})"))
    return Ok(None)


def _git_failure(error: GitError, message: str) -> PublishError:
    return PublishError(kind="git_failed", message=message, hint=error.message or None)
