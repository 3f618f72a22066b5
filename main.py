#!/usr/bin/env python3
"""SOAP REST bridge - Entry point."""
import json
import logging
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import click
from colorama import Fore, init

from soap_rest import __version__
from soap_rest.cli.console import ServiceConsole, load_settings
from soap_rest.errors import SoapServiceError
from soap_rest.service import SoapService

# Initialize colorama
init(autoreset=True)


def build_console(config_path: str) -> ServiceConsole:
    """Create the console for the service described in a settings file."""
    try:
        service = SoapService(load_settings(Path(config_path)))
    except SoapServiceError as e:
        raise click.ClickException(str(e))
    return ServiceConsole(service)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=lambda: os.getenv("SOAP_REST_SERVICE_CONFIG", "service.json"),
    help="Path to the service settings JSON file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config_path, verbose):
    """Expose a SOAP service as REST-style resources."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.option("--refresh", is_flag=True, help="Rebuild the schema from the service")
@click.pass_context
def functions(ctx, refresh):
    """List the service operations."""
    build_console(ctx.obj["config_path"]).list_functions(refresh)


@cli.command()
@click.option("--refresh", is_flag=True, help="Rebuild the schema from the service")
@click.pass_context
def types(ctx, refresh):
    """List the service data types."""
    build_console(ctx.obj["config_path"]).list_types(refresh)


@cli.command()
@click.option("--refresh", is_flag=True, help="Rebuild the schema from the service")
@click.pass_context
def resources(ctx, refresh):
    """Print accessible operations with their allowed verbs."""
    build_console(ctx.obj["config_path"]).list_resources(refresh)


@cli.command()
@click.argument("name")
@click.option("--payload", default="{}", help="JSON object sent as the operation input")
@click.pass_context
def call(ctx, name, payload):
    """Call an operation by name (case-insensitive)."""
    try:
        data = json.loads(payload)
    except ValueError as e:
        raise click.BadParameter(f"invalid JSON: {e}", param_hint="--payload")
    if not isinstance(data, dict):
        raise click.BadParameter("must be a JSON object", param_hint="--payload")

    if not build_console(ctx.obj["config_path"]).call(name, data):
        sys.exit(1)


@cli.command()
@click.option("--output", type=click.Path(dir_okay=False), help="Write docs to this file")
@click.pass_context
def docs(ctx, output):
    """Generate Swagger docs for the service."""
    build_console(ctx.obj["config_path"]).export_docs(Path(output) if output else None)


@cli.command()
@click.pass_context
def refresh(ctx):
    """Drop the cached schema and rediscover it."""
    click.echo(f"{Fore.CYAN}Refreshing schema...")
    build_console(ctx.obj["config_path"]).refresh()


if __name__ == "__main__":
    cli()
