"""State commands - inspect the state file."""

import json
import click
from ...presentation.human_formatter import format_state_entry
from ...state.store import StateStore
from ...utils.errors import InfraGraphError, StateError
from ...config.manager import load_settings
from ..utils import fail


def _open_store(ctx) -> StateStore:
    settings = load_settings(ctx.obj.get("config_path"))
    return StateStore(ctx.obj.get("state_path") or settings.state.path)


@click.group()
def state():
    """Inspect recorded state."""
    pass


@state.command(name="list")
@click.pass_context
def list_entries(ctx):
    """List resource addresses in state."""
    try:
        store = _open_store(ctx)
    except InfraGraphError as e:
        fail(e)
    
    for address in store.addresses():
        entry = store.get(address)
        click.echo(f"{address}\t{entry.provider_id}")


@state.command()
@click.argument('address')
@click.option('--json', 'json_output', is_flag=True, help='Output the entry as JSON')
@click.pass_context
def show(ctx, address, json_output):
    """Show one state entry."""
    try:
        store = _open_store(ctx)
        entry = store.get(address)
        if entry is None:
            raise StateError(f"{address} is not in state")
    except InfraGraphError as e:
        fail(e)
    
    if json_output:
        click.echo(json.dumps(entry.model_dump(mode="json"), indent=2))
    else:
        click.echo(format_state_entry(entry))
