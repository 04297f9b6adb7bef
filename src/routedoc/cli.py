"""CLI entry point for routedoc."""

import logging
from pathlib import Path

import click

from routedoc.config import ConfigError, load_config
from routedoc.generator.document import generate_docs
from routedoc.project.graph import TypeGraphError, open_session
from routedoc.routes.walker import RouteTreeWalker


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """routedoc — generate Markdown API docs from route descriptor types."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Output Markdown file (overrides the config).")
def generate(config_path: Path, output: Path | None):
    """Generate the API document described by a YAML config file."""
    try:
        options = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if output is not None:
        options.output_path = output.resolve()

    click.echo(f"Documenting {len(options.services)} services from {options.resolve(options.type_graph)}...")
    try:
        result = generate_docs(options)
    except TypeGraphError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Wrote {result.endpoint_count} endpoints to {options.resolve(options.output_path)}")


@main.command()
@click.argument("graph_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--file", "entry_file", required=True, help="Source file that exports the route alias.")
@click.option("--alias", default="App", show_default=True, help="Route descriptor type alias.")
def endpoints(graph_path: Path, entry_file: str, alias: str):
    """List the endpoints of one route alias in a type graph."""
    try:
        with open_session(graph_path) as session:
            source = session.add_source_file(entry_file)
            if source is None:
                raise click.ClickException(f"entry file not found: {entry_file}")
            route_type = source.type_alias(alias)
            if route_type is None:
                raise click.ClickException(f"type alias not found: {alias}")
            records = RouteTreeWalker().walk(route_type)
    except TypeGraphError as e:
        raise click.ClickException(str(e)) from e

    for record in records:
        click.echo(record.title)
