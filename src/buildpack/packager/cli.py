"""The `buildpack-packager` command-line interface."""

import importlib.metadata
from pathlib import Path

import click

from .config import DEFAULT_FETCH_TIMEOUT, DEFAULT_MAX_CONCURRENT_FETCHES, PackagerConfig
from .exceptions import UsageError
from .models import USAGE
from .packaging.orchestrator import run

try:
    __version__ = importlib.metadata.version("buildpack-packager")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="buildpack-packager",
    message="%(prog)s version %(version)s",
)
@click.argument("mode", required=False, default="")
@click.option(
    "--root",
    "buildpack_root",
    default=".",
    type=click.Path(file_okay=False, resolve_path=True),
    help="Buildpack root directory containing manifest.yml and VERSION.",
)
@click.option(
    "--max-concurrent-fetches",
    default=DEFAULT_MAX_CONCURRENT_FETCHES,
    envvar="BUILDPACK_PACKAGER_MAX_FETCHES",
    show_default=True,
    type=click.IntRange(min=1),
    help="How many dependencies to fetch at once in cached mode.",
)
@click.option(
    "--fetch-timeout",
    default=DEFAULT_FETCH_TIMEOUT,
    envvar="BUILDPACK_PACKAGER_FETCH_TIMEOUT",
    show_default=True,
    type=click.FloatRange(min=0, min_open=True),
    help="Timeout in seconds for downloading a single dependency.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    mode: str,
    buildpack_root: str,
    max_concurrent_fetches: int,
    fetch_timeout: float,
) -> None:
    """Packages a buildpack into a zip archive.

    MODE is `cached` (bundle verified dependencies) or `uncached`.
    """
    config = PackagerConfig(
        max_concurrent_fetches=max_concurrent_fetches,
        fetch_timeout=fetch_timeout,
    )
    outcome = run(mode, Path(buildpack_root), config)

    if isinstance(outcome.error, UsageError):
        click.echo(USAGE)
        ctx.exit(1)

    if not outcome.ok:
        click.secho(f"❌ Packaging failed:\n{outcome.error}", fg="red", err=True)
        raise click.Abort() from outcome.error

    click.secho(f"✅ Buildpack packaged: {outcome.archive_path}", fg="green")


main = cli
