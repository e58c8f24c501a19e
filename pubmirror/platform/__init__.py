"""Platform layer: subprocesses and filesystem."""

from .files import atomic_write_text, copy_tree, remove_path
from .process import ProcessError, run, run_streaming

__all__ = [
    # files
    "atomic_write_text",
    "copy_tree",
    "remove_path",
    # process
    "ProcessError",
    "run",
    "run_streaming",
]
