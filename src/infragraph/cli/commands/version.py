"""Version command - show infragraph and runtime versions."""

import platform
import click
from ... import __version__
from ...config.paths import get_defaults_path


@click.command()
@click.option('--verbose', 'details', is_flag=True, help='Also show Python version and defaults location')
def version(details):
    """Show infragraph version."""
    click.echo(f"infragraph version {__version__}")
    if details:
        click.echo(f"python {platform.python_version()}")
        click.echo(f"defaults: {get_defaults_path()}")
