from __future__ import annotations

import os
from pathlib import Path

import typer

from pubmirror import __version__
from pubmirror.cli.commands.publish_cmd import order, publish
from pubmirror.cli.commands.versions_cmd import latest_version, set_version
from pubmirror.cli.context import CONFIG_ENV, ROOT_ENV
from pubmirror.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


app.command()(order)
app.command()(publish)
app.command("latest-version")(latest_version)
app.command("set-version")(set_version)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    repo_root: Path | None = typer.Option(
        None,
        "--repo-root",
        help="Monorepo root (default: current directory)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: <repo-root>/pubmirror.toml)",
    ),
) -> None:
    del version

    if repo_root is not None:
        try:
            root = repo_root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --repo-root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        os.environ[ROOT_ENV] = str(root)

    if config is not None:
        os.environ[CONFIG_ENV] = str(config.expanduser().resolve())


def main() -> None:
    app()
