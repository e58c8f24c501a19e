from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PublishErrorKind = Literal[
    "invalid_input",
    "missing_dependency",
    "tool_missing",
    "publish_failed",
    "not_available",
    "download_failed",
    "extract_failed",
    "copy_failed",
    "git_failed",
    "version_failed",
]


@dataclass(frozen=True, slots=True)
class PublishError:
    kind: PublishErrorKind
    message: str
    hint: str | None = None
