"""CLI entry point for cut-release."""

from __future__ import annotations

from pathlib import Path

import click

from .config import load_config
from .errors import ReleaseError
from .pipeline import run_release


@click.command()
@click.version_option(package_name="cut-release")
@click.argument("increment", required=False)
@click.argument("version", required=False)
@click.option(
    "--skip-tests",
    is_flag=True,
    help="Skips tests. This is not recommended but can be used to work "
    "around environmental issues.",
)
def cli(increment: str | None, version: str | None, skip_tests: bool) -> None:
    """Cut a release of the project in the current directory.

    INCREMENT is one of major, minor, patch, prerelease or custom. VERSION is
    the explicit version to release and is required for custom.

    Without arguments the options saved in the .cut-release file are used,
    which lets a failed release be retried once the problem is fixed.
    """
    root = Path.cwd()
    try:
        config = load_config(root)
        run_release(increment, version, skip_tests=skip_tests, config=config, root=root)
    except ReleaseError as exc:
        raise click.ClickException(exc.message) from exc
