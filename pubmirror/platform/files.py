"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "copy_tree", "remove_path"]


def copy_tree(src: Path, dest: Path) -> None:
    """Copy ``src`` onto ``dest`` recursively.

    Directories are created as needed and merged into existing ones; files are
    copied byte for byte, overwriting whatever is at the destination. Symlinks
    are followed and no metadata is preserved.

    Raises:
        FileNotFoundError: If ``src`` does not exist.
        OSError: On any other filesystem failure.
    """
    if src.is_dir():
        dest.mkdir(parents=True, exist_ok=True)
        for child in sorted(src.iterdir()):
            copy_tree(child, dest / child.name)
        return
    shutil.copyfile(src, dest)


def remove_path(path: Path) -> bool:
    """Delete a file or directory tree, ignoring every error.

    Returns:
        True if something was removed.
    """
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError:
        return False
    return True


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)
