"""Main CLI for openapi2http."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .errors import NoOperationsFound, Openapi2HttpError
from .generator import HTTPRequestGenerator
from .locator import find_operations, list_operations
from .parser import OpenAPIParser


@click.group(context_settings={"auto_envvar_prefix": "OPENAPI2HTTP"})
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
def main(verbose: bool):
    """openapi2http - Generate .http request files from OpenAPI specs.

    Example:

        # See what the spec offers
        openapi2http list petstore.yaml

        # Render one operation
        openapi2http generate petstore.yaml --operation-id getPetById
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command("list")
@click.argument("spec", type=str)
def list_command(spec: str):
    """List the operations in an OpenAPI spec.

    SPEC can be a file path or URL to an OpenAPI 3.x specification.
    """
    try:
        parsed = OpenAPIParser().parse(spec)
    except Openapi2HttpError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    list_operations(parsed, Console())


@main.command()
@click.argument("spec", type=str)
@click.option("--operation-id", help="Only the operation with this operationId")
@click.option("--path", "path_filter", help="Only operations on this path, e.g. /pet")
@click.option("--tag", help="Only operations with this tag")
@click.option("--base-url", envvar="OPENAPI2HTTP_BASE_URL", help="Override the server URL from the spec")
@click.option("--output", "-o", type=click.Path(), help="Output file path (default: stdout)")
def generate(
    spec: str,
    operation_id: Optional[str],
    path_filter: Optional[str],
    tag: Optional[str],
    base_url: Optional[str],
    output: Optional[str],
):
    """Generate .http requests from an OpenAPI spec.

    Without filters every operation is rendered. Filters are combined, so
    --path and --tag together select operations matching both.

    Examples:

        openapi2http generate petstore.yaml --tag pet -o pet.http
        openapi2http generate https://api.example.com/openapi.json --path /users
    """
    try:
        parsed = OpenAPIParser().parse(spec)
        click.echo(f"Parsed: {parsed.title} v{parsed.version}", err=True)

        ops = find_operations(parsed, operation_id=operation_id, path=path_filter, tag=tag)
        if not ops:
            raise NoOperationsFound("no operations found")
        click.echo(f"Found {len(ops)} operations", err=True)
    except NoOperationsFound:
        click.echo("No operations found", err=True)
        sys.exit(1)
    except Openapi2HttpError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    generator = HTTPRequestGenerator(parsed, base_url=base_url)
    collection = generator.generate_collection(ops)

    for error in collection.errors:
        click.echo(f"Error generating request: {error}", err=True)

    if output:
        collection.save(Path(output))
        click.echo(f"Saved {len(collection.requests)} requests to: {output}", err=True)
    else:
        click.echo(collection.to_http(), nl=False)

    if collection.errors:
        sys.exit(1)


if __name__ == "__main__":
    main()
