from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from pubmirror.core.config import CONFIG_FILENAME, Config, load_config_or_default
from pubmirror.core.errors import ErrorCode
from pubmirror.core.result import Err
from pubmirror.output.console import ConsoleProtocol, RichConsole

ROOT_ENV = "PUBMIRROR_ROOT"
CONFIG_ENV = "PUBMIRROR_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    config: Config
    console: ConsoleProtocol


def build_context() -> CLIContext:
    console = RichConsole()

    env_root = os.environ.get(ROOT_ENV)
    repo_root = Path(env_root) if env_root else Path.cwd()
    if not repo_root.is_dir():
        console.error(f"repository root not found: {repo_root}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    env_config = os.environ.get(CONFIG_ENV)
    config_path = Path(env_config) if env_config else repo_root / CONFIG_FILENAME
    config_result = load_config_or_default(config_path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(repo_root=repo_root, config=config_result.value, console=console)
