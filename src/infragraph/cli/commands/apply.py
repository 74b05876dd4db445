"""Apply command - compute a plan and execute it."""

import json
import click
from ...apply.models import ApplyReport
from ...presentation.human_formatter import format_plan, format_report
from ...utils.errors import InfraGraphError, PartialApplyError
from ...utils.logging import get_logger
from ...workspace import Workspace
from ..utils import fail, parse_variables, resolve_document

logger = get_logger("cli.apply")


def emit_report(report: ApplyReport, json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps(report.model_dump(mode="json"), indent=2))
    else:
        click.echo(format_report(report))


def run_plan(workspace: Workspace, computed, registry, concurrency, json_output, yes) -> None:
    """Confirm, execute and report a plan; exits non-zero on failure."""
    if not json_output:
        click.echo(format_plan(computed))
    
    if not computed.has_changes:
        if not json_output:
            click.echo("Nothing to apply.", err=True)
        else:
            emit_report(ApplyReport(), json_output)
        return
    
    if not yes and not click.confirm("Apply these changes?", err=True):
        click.echo("Apply cancelled.", err=True)
        return
    
    try:
        report = workspace.apply(computed, registry, concurrency)
    except PartialApplyError as e:
        emit_report(e.report, json_output)
        fail(e, "Re-run apply to retry the failed and blocked resources.")
    except InfraGraphError as e:
        fail(e)
    
    emit_report(report, json_output)


@click.command()
@click.argument('document', type=click.Path(exists=False))
@click.option('--concurrency', '-p', type=click.IntRange(min=1), help='Maximum concurrent provider operations')
@click.option('--json', 'json_output', is_flag=True, help='Output the apply report as JSON')
@click.option('--yes', '-y', is_flag=True, help='Skip the confirmation prompt')
@click.option('--var', 'var_pairs', multiple=True, help='Set a variable (key=value), repeatable')
@click.pass_context
def apply(ctx, document, concurrency, json_output, yes, var_pairs):
    """Plan DOCUMENT against state and apply the changes."""
    try:
        workspace = Workspace.from_config(ctx.obj.get("config_path"), ctx.obj.get("state_path"))
        registry, graph = workspace.load(resolve_document(document), parse_variables(var_pairs))
        computed = workspace.plan(registry, graph)
    except InfraGraphError as e:
        fail(e)
    
    run_plan(workspace, computed, registry, concurrency, json_output, yes)
