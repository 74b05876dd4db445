"""Validate command - check a desired-state document without planning."""

import click
from ...utils.errors import InfraGraphError
from ...utils.logging import get_logger
from ...workspace import Workspace
from ..utils import fail, parse_variables, resolve_document

logger = get_logger("cli.validate")


@click.command()
@click.argument('document', type=click.Path(exists=False))
@click.option('--var', 'var_pairs', multiple=True, help='Set a variable (key=value), repeatable')
@click.pass_context
def validate(ctx, document, var_pairs):
    """Validate resource definitions, references and dependency cycles."""
    try:
        workspace = Workspace.from_config(ctx.obj.get("config_path"), ctx.obj.get("state_path"))
        registry, graph = workspace.load(resolve_document(document), parse_variables(var_pairs))
    except InfraGraphError as e:
        fail(e)
    
    click.echo(
        f"✅ {len(registry)} resources valid, "
        f"{graph.graph.number_of_edges()} dependencies, no cycles."
    )
