"""Destroy command - delete everything recorded in state."""

import click
from ...utils.errors import InfraGraphError
from ...workspace import Workspace
from ..utils import fail
from .apply import run_plan


@click.command()
@click.option('--concurrency', '-p', type=click.IntRange(min=1), help='Maximum concurrent provider operations')
@click.option('--json', 'json_output', is_flag=True, help='Output the apply report as JSON')
@click.option('--yes', '-y', is_flag=True, help='Skip the confirmation prompt')
@click.pass_context
def destroy(ctx, concurrency, json_output, yes):
    """Delete every resource in state, dependents before dependencies."""
    try:
        workspace = Workspace.from_config(ctx.obj.get("config_path"), ctx.obj.get("state_path"))
        computed = workspace.plan_destroy()
    except InfraGraphError as e:
        fail(e)
    
    run_plan(workspace, computed, None, concurrency, json_output, yes)
