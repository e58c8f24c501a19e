"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from pubmirror.core.errors import ErrorCode
from pubmirror.output.console import Style
from pubmirror.publish.errors import PublishError

if TYPE_CHECKING:
    from pubmirror.cli.context import CLIContext


def publish_error_code(error: PublishError) -> ErrorCode:
    match error.kind:
        case "invalid_input" | "missing_dependency" | "version_failed":
            return ErrorCode.USER_ERROR
        case "tool_missing":
            return ErrorCode.ENV_ERROR
        case "publish_failed" | "not_available" | "download_failed":
            return ErrorCode.NETWORK_ERROR
        case "extract_failed" | "copy_failed" | "git_failed":
            return ErrorCode.IO_ERROR


def exit_with_error(error: PublishError, ctx: CLIContext) -> NoReturn:
    """Print ``error`` (and its hint) and exit with the matching code."""
    ctx.console.error(error.message)
    if error.hint:
        ctx.console.print(f"hint: {error.hint}", Style.DIM)
    raise typer.Exit(code=int(publish_error_code(error)))
