from __future__ import annotations

import re
from dataclasses import dataclass

# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

_PrereleaseKey = tuple[tuple[int, int, str], ...]


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        s = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            s += "-" + ".".join(self.prerelease)
        if self.build:
            s += "+" + ".".join(self.build)
        return s

    @property
    def prerelease_tag(self) -> str | None:
        """First prerelease identifier ("canary" in 2.0.0-canary.fe9e0d5de535)."""
        return self.prerelease[0] if self.prerelease else None

    @property
    def sort_key(self) -> tuple[int, int, int, tuple[int, _PrereleaseKey]]:
        """Key ordering versions by semver precedence (build metadata ignored)."""
        if not self.prerelease:
            return (self.major, self.minor, self.patch, (1, ()))
        ids = tuple(
            (0, int(part), "") if part.isdigit() else (1, 0, part) for part in self.prerelease
        )
        return (self.major, self.minor, self.patch, (0, ids))

    def __lt__(self, other: SemVer) -> bool:
        return self.sort_key < other.sort_key

    def __le__(self, other: SemVer) -> bool:
        return self.sort_key <= other.sort_key


def parse_version(text: str) -> SemVer | None:
    m = _SEMVER_RE.match(text.strip())
    if m is None:
        return None
    pre = m.group(4)
    build = m.group(5)
    return SemVer(
        int(m.group(1)),
        int(m.group(2)),
        int(m.group(3)),
        prerelease=tuple(pre.split(".")) if pre else (),
        build=tuple(build.split(".")) if build else (),
    )


def dist_tag(version: str) -> str:
    """Registry dist-tag for a version: its prerelease tag, else "latest"."""
    parsed = parse_version(version)
    if parsed is None or parsed.prerelease_tag is None:
        return "latest"
    return parsed.prerelease_tag
