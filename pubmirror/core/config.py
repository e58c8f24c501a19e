"""Typed configuration loading.

``pubmirror.toml`` lives at the monorepo root. Every table and key is
optional; missing or mistyped values fall back to the defaults below.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

if TYPE_CHECKING:
    from pubmirror.publish.model import PackageDetails

__all__ = [
    "AssetsConfig",
    "Config",
    "ConfigError",
    "CONFIG_FILENAME",
    "PackagesConfig",
    "RegistryConfig",
    "RetryPolicy",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "pubmirror.toml"

DEFAULT_PACKAGES_ROOT = "packages"
DEFAULT_NAMESPACE = "@tldraw/"
DEFAULT_REGISTRY_URL = "http://127.0.0.1:4873"
DEFAULT_TOKEN_ENV = "NPM_TOKEN"
DEFAULT_ASSETS_REPO_URL = "https://github.com/superwall-me/tldraw-assets.git"
DEFAULT_ASSETS_DIR = "tldraw-assets"

PUBLISH_ATTEMPTS = 5
PUBLISH_DELAY_SECONDS = 10.0
AVAILABILITY_ATTEMPTS = 10
AVAILABILITY_DELAY_SECONDS = 3.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Config could not be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Attempt budget and fixed delay for one retried step."""

    attempts: int
    delay_seconds: float


@dataclass(frozen=True, slots=True)
class PackagesConfig:
    root: str = DEFAULT_PACKAGES_ROOT
    # Dependencies whose name starts with this prefix are internal.
    namespace: str = DEFAULT_NAMESPACE


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    url: str = DEFAULT_REGISTRY_URL
    token_env: str = DEFAULT_TOKEN_ENV

    def tarball_url(self, package: PackageDetails) -> str:
        """URL of the tarball the registry serves for a published version."""
        base = self.url.rstrip("/")
        return f"{base}/{package.name}/-/{package.tarball_name}"


@dataclass(frozen=True, slots=True)
class AssetsConfig:
    """Downstream asset repository receiving one branch per published version."""

    repo_url: str = DEFAULT_ASSETS_REPO_URL
    dir: str = DEFAULT_ASSETS_DIR


def _default_version_files() -> dict[str, str]:
    return {
        "@tldraw/editor": "src/version.ts",
        "@tldraw/tldraw": "src/lib/ui/version.ts",
    }


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    packages: PackagesConfig = field(default_factory=PackagesConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    assets: AssetsConfig = field(default_factory=AssetsConfig)
    publish_retry: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(PUBLISH_ATTEMPTS, PUBLISH_DELAY_SECONDS)
    )
    availability_retry: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(AVAILABILITY_ATTEMPTS, AVAILABILITY_DELAY_SECONDS)
    )
    # Package name -> source file (relative to the package dir) holding
    # `export const version = '...'`.
    version_files: dict[str, str] = field(default_factory=_default_version_files)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a retry budget is below one attempt or a delay is negative.
        """
        packages: StrDict = get_table(data, "packages") or {}
        registry: StrDict = get_table(data, "registry") or {}
        assets: StrDict = get_table(data, "assets") or {}
        retry: StrDict = get_table(data, "retry") or {}
        versions: StrDict = get_table(data, "versions") or {}

        version_files = _default_version_files()
        files = get_table(versions, "files")
        if files is not None:
            version_files = {k: v for k, v in files.items() if isinstance(v, str) and v.strip()}

        return cls(
            packages=PackagesConfig(
                root=get_str(packages, "root") or DEFAULT_PACKAGES_ROOT,
                namespace=get_str(packages, "namespace") or DEFAULT_NAMESPACE,
            ),
            registry=RegistryConfig(
                url=get_str(registry, "url") or DEFAULT_REGISTRY_URL,
                token_env=get_str(registry, "token_env") or DEFAULT_TOKEN_ENV,
            ),
            assets=AssetsConfig(
                repo_url=get_str(assets, "repo_url") or DEFAULT_ASSETS_REPO_URL,
                dir=get_str(assets, "dir") or DEFAULT_ASSETS_DIR,
            ),
            publish_retry=_retry_policy(
                get_table(retry, "publish") or {}, PUBLISH_ATTEMPTS, PUBLISH_DELAY_SECONDS
            ),
            availability_retry=_retry_policy(
                get_table(retry, "availability") or {},
                AVAILABILITY_ATTEMPTS,
                AVAILABILITY_DELAY_SECONDS,
            ),
            version_files=version_files,
        )


def _retry_policy(table: StrDict, attempts: int, delay: float) -> RetryPolicy:
    n = get_int(table, "attempts")
    d = get_float(table, "delay_seconds")
    policy = RetryPolicy(
        attempts=attempts if n is None else n,
        delay_seconds=delay if d is None else d,
    )
    if policy.attempts < 1:
        raise ValueError(f"retry attempts must be >= 1 (got {policy.attempts})")
    if policy.delay_seconds < 0:
        raise ValueError(f"retry delay must be >= 0 (got {policy.delay_seconds})")
    return policy


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to pubmirror.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file yields the default Config."""
    if not path.exists():
        return Ok(Config())
    return load_config(path)
