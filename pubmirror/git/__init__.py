"""Git operations used to mirror packages into the asset repository."""

from pubmirror.git.repository import GitError, Repository

__all__ = ["GitError", "Repository"]
