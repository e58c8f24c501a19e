"""Git repository abstraction.

Wraps the handful of git commands needed to publish a package copy to the
downstream asset repository. Every operation returns a Result.

Usage:
    match Repository.clone(url, work_dir / "assets"):
        case Ok(repo):
            repo.checkout_new_branch("editor-2.0.0")
        case Err(e):
            print(f"clone failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pubmirror.core.result import Err, Ok, Result
from pubmirror.platform.process import ProcessError
from pubmirror.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"clone", "fetch", "pull", "push"})

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "push -f")
        message: Error message, usually git's stderr
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def _timeout_for(args: list[str]) -> float:
    if args and args[0] in _NETWORK_COMMANDS:
        return _GIT_NETWORK_TIMEOUT_SECONDS
    return _GIT_TIMEOUT_SECONDS


def _to_git_error(label: str, error: ProcessError) -> GitError:
    return GitError(
        command=label,
        message=error.stderr.strip() or error.stdout.strip() or f"git {label} failed",
        returncode=error.returncode,
    )


class Repository:
    """A local git working tree.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def __repr__(self) -> str:
        return f"Repository({self.path})"

    @classmethod
    def clone(cls, url: str, dest: Path) -> Result[Repository, GitError]:
        """Clone ``url`` into ``dest`` (which must not exist yet)."""
        args = ["clone", url, str(dest)]
        result = run_process(["git", *args], cwd=dest.parent, timeout=_timeout_for(args))
        if isinstance(result, Err):
            return Err(_to_git_error("clone", result.error))
        return Ok(cls(dest))

    def exists(self) -> bool:
        return (self.path / ".git").exists()

    def checkout_new_branch(self, branch: str) -> Result[None, GitError]:
        return self._run_checked(["checkout", "-b", branch], label="checkout -b")

    def add_all(self) -> Result[None, GitError]:
        return self._run_checked(["add", "."], label="add")

    def commit(self, message: str) -> Result[None, GitError]:
        result = self._run(["commit", "-m", message])
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command="commit",
                    message=e.stderr.strip()
                    or e.stdout.strip()
                    or "git commit failed (configure git user.name/user.email, then retry)",
                    returncode=e.returncode,
                )
            )
        return Ok(None)

    def push(
        self,
        branch: str,
        *,
        remote: str = "origin",
        force: bool = False,
        set_upstream: bool = True,
    ) -> Result[None, GitError]:
        """Push ``branch`` to ``remote``.

        With ``force`` an existing remote branch of the same name is overwritten.
        """
        args = ["push"]
        if force:
            args.append("-f")
        if set_upstream:
            args.append("-u")
        args.extend([remote, branch])
        return self._run_checked(args, label="push -f" if force else "push")

    def _run_checked(self, args: list[str], *, label: str) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_to_git_error(label, result.error))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_timeout_for(args)
        )
