"""Main CLI entry point for infragraph."""

import click
from .commands.apply import apply
from .commands.destroy import destroy
from .commands.graph import graph
from .commands.plan import plan
from .commands.state import state
from .commands.validate import validate
from .commands.version import version as version_command
from .. import __version__
from ..utils.logging import level_for_verbosity, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="infragraph", message="%(prog)s version %(version)s")
@click.option('--config', '-c', 'config_path', type=click.Path(), help='Settings YAML layered over defaults')
@click.option('--state', '-s', 'state_path', type=click.Path(), help='State file (overrides settings)')
@click.option('--verbose', '-v', count=True, help='Increase log verbosity (-v info, -vv debug)')
@click.pass_context
def cli(ctx, config_path, state_path, verbose):
    """infragraph - Declarative resource graph planner and applier."""
    setup_logging(level=level_for_verbosity(verbose))
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["state_path"] = state_path


cli.add_command(validate)
cli.add_command(graph)
cli.add_command(plan)
cli.add_command(apply)
cli.add_command(destroy)
cli.add_command(state)
cli.add_command(version_command)
