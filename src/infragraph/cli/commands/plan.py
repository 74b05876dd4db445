"""Plan command - compute and display a plan without applying it."""

import json
import click
from ...presentation.human_formatter import format_plan
from ...utils.errors import InfraGraphError
from ...utils.logging import get_logger
from ...workspace import Workspace
from ..utils import fail, parse_variables, resolve_document

logger = get_logger("cli.plan")


@click.command()
@click.argument('document', type=click.Path(exists=False))
@click.option('--json', 'json_output', is_flag=True, help='Output the plan as JSON')
@click.option('--all', 'show_all', is_flag=True, help='Include unchanged resources')
@click.option('--var', 'var_pairs', multiple=True, help='Set a variable (key=value), repeatable')
@click.pass_context
def plan(ctx, document, json_output, show_all, var_pairs):
    """
    Show what apply would change.
    
    Compares DOCUMENT against the state file; never contacts the provider.
    """
    try:
        workspace = Workspace.from_config(ctx.obj.get("config_path"), ctx.obj.get("state_path"))
        registry, graph = workspace.load(resolve_document(document), parse_variables(var_pairs))
        computed = workspace.plan(registry, graph)
    except InfraGraphError as e:
        fail(e)
    
    if json_output:
        click.echo(json.dumps(computed.model_dump(mode="json"), indent=2))
    else:
        click.echo(format_plan(computed, show_unchanged=show_all))
