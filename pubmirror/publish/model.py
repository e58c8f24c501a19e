from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class PackageDetails:
    """One publishable package, read from its manifest."""

    name: str  # scoped, e.g. "@tldraw/editor"
    dir: Path
    version: str
    # Internal dependency names, in manifest order.
    local_deps: tuple[str, ...] = ()

    @property
    def unscoped_name(self) -> str:
        if self.name.startswith("@") and "/" in self.name:
            return self.name.split("/", 1)[1]
        return self.name

    @property
    def tarball_name(self) -> str:
        return f"{self.unscoped_name}-{self.version}.tgz"

    @property
    def branch_name(self) -> str:
        return f"{self.unscoped_name}-{self.version}"


# Keyed by package name; insertion order follows the sorted directory listing.
type PackageRegistry = dict[str, PackageDetails]

type PublishOrder = tuple[PackageDetails, ...]


@dataclass(frozen=True, slots=True)
class PublishSummary:
    published: tuple[str, ...]
