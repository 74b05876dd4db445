"""Graph command - show the dependency order of a desired-state document."""

import json
import click
from ...presentation.human_formatter import format_order
from ...utils.errors import InfraGraphError
from ...workspace import Workspace
from ..utils import fail, parse_variables, resolve_document


@click.command()
@click.argument('document', type=click.Path(exists=False))
@click.option('--reverse', is_flag=True, help='Show deletion order (dependents first)')
@click.option('--json', 'json_output', is_flag=True, help='Output order and edges as JSON')
@click.option('--var', 'var_pairs', multiple=True, help='Set a variable (key=value), repeatable')
@click.pass_context
def graph(ctx, document, reverse, json_output, var_pairs):
    """Show resources in dependency order."""
    try:
        workspace = Workspace.from_config(ctx.obj.get("config_path"), ctx.obj.get("state_path"))
        _, dependency_graph = workspace.load(resolve_document(document), parse_variables(var_pairs))
    except InfraGraphError as e:
        fail(e)
    
    order = dependency_graph.reverse_topological_order() if reverse else dependency_graph.topological_order()
    
    if json_output:
        click.echo(json.dumps({
            "order": order,
            "dependencies": {address: dependency_graph.dependencies(address) for address in order},
        }, indent=2))
    else:
        click.echo(format_order(order))
