"""
Command-line interface for the OPA bridge.

Usage:
    python -m regobridge.cli version
    python -m regobridge.cli compare 0.15.0 0.14.0-dev
    python -m regobridge.cli parse policies/authz.rego
    python -m regobridge.cli run -- eval --format json data
"""

from __future__ import annotations

import json
import logging
import sys

import click

from .core.errors import BridgeError
from .core.invoker import ProcessInvoker
from .core.models import BinaryNotFound, Failure
from .core.refs import ref_to_string
from .core.version import BUNDLE_MIN_VERSION, Compatibility, data_flag, same_or_newer
from .plugins.install import ConsoleInstallPrompt, DownloadInstaller
from .plugins.settings import EnvSettingsProvider, YamlSettingsProvider
from . import __version__


EXIT_FAILURE = 1
EXIT_NOT_FOUND = 2


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    help="YAML settings file with an `opa` section",
    type=click.Path(dir_okay=False),
)
@click.option(
    "--opa",
    "binary",
    default="opa",
    show_default=True,
    help="Name or path of the opa binary",
)
@click.option("--verbose", "-v", is_flag=True, help="Log subprocess activity")
@click.pass_context
def cli(ctx: click.Context, config: str, binary: str, verbose: bool):
    """Bridge to the OPA command-line tool."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    settings = YamlSettingsProvider(config) if config else EnvSettingsProvider()
    ctx.obj = {
        "binary": binary,
        "invoker": ProcessInvoker(settings, ConsoleInstallPrompt()),
    }


def _fail(result: Failure | BinaryNotFound) -> None:
    if isinstance(result, BinaryNotFound):
        sys.exit(EXIT_NOT_FOUND)
    click.echo(click.style(result.message.rstrip("\n"), fg="red"), err=True)
    sys.exit(EXIT_FAILURE)


@cli.command()
@click.pass_obj
def version(obj: dict):
    """Show the installed opa version and the flags it supports."""
    compat = Compatibility(obj["invoker"], obj["binary"])
    try:
        installed = compat.installed_version_string()
    except BridgeError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(EXIT_FAILURE)

    bundle = same_or_newer(installed, BUNDLE_MIN_VERSION)
    click.echo(f"Version: {installed or 'unknown'}")
    click.echo(f"Bundle flags: {'yes' if bundle else 'no'}")
    click.echo(f"Data parameter: {data_flag(bundle)}")


@cli.command()
@click.argument("a")
@click.argument("b")
def compare(a: str, b: str):
    """Print whether version A is the same or newer than version B."""
    click.echo("true" if same_or_newer(a, b) else "false")


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option("--stdin", "stdin", default="", help="Text written to opa's stdin")
@click.option("--timeout", type=float, help="Seconds before opa is killed")
@click.pass_obj
def run(obj: dict, args: tuple, stdin: str, timeout: float):
    """Run opa with ARGS and print its JSON output."""
    try:
        result = obj["invoker"].run(obj["binary"], list(args), stdin, timeout=timeout)
    except BridgeError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(EXIT_FAILURE)

    if isinstance(result, (Failure, BinaryNotFound)):
        _fail(result)
    click.echo(json.dumps(result.value, indent=2))


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def parse(obj: dict, file: str):
    """Show the package and imports of a Rego FILE."""
    try:
        result = obj["invoker"].parse_file(obj["binary"], file)
    except BridgeError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(EXIT_FAILURE)

    if isinstance(result, (Failure, BinaryNotFound)):
        _fail(result)
    click.echo(f"package {result.namespace}")
    for dep in result.dependencies:
        click.echo(f"import {dep}")


@cli.command()
@click.argument("ref")
def ref(ref: str):
    """Format a JSON-encoded REF (a list of terms) as a string."""
    try:
        terms = json.loads(ref)
        if not isinstance(terms, list):
            raise ValueError("ref must be a JSON list")
        click.echo(ref_to_string(terms))
    except ValueError as e:
        click.echo(click.style(f"Invalid ref: {e}", fg="red"), err=True)
        sys.exit(EXIT_FAILURE)


@cli.command()
@click.option("--version", "opa_version", default="latest", show_default=True, help="Release to install")
@click.option(
    "--dest",
    "-d",
    default=".",
    show_default=True,
    help="Directory to install into",
    type=click.Path(file_okay=False),
)
def install(opa_version: str, dest: str):
    """Download the opa binary for this platform."""
    try:
        target = DownloadInstaller(opa_version).install(dest)
    except BridgeError as e:
        click.echo(click.style(f"Install failed: {e}", fg="red"), err=True)
        sys.exit(EXIT_FAILURE)
    click.echo(click.style(f"Installed opa to {target}", fg="green"))


if __name__ == "__main__":
    cli()
