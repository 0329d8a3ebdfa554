"""Click CLI for fwautomation.

Commands:
- schema: Print provider and resource schemas
- validate: Check firewall group attributes without contacting the server
- create: Add a hostname/IP to a firewall group
- read: Confirm a firewall group exists
- delete: Remove a hostname/IP from a firewall group
- apply: Move a resource from a prior state file to a planned one
"""

import asyncio
import json
import sys
from typing import Any, Dict, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fwautomation import __version__
from fwautomation.diagnostics.logger import setup_logging
from fwautomation.plugin import build_provider
from fwautomation.provider.schema import Diagnostics, Provider, Severity
from fwautomation.resources.firewall_group import RESOURCE_TYPE

console = Console()
err_console = Console(stderr=True)


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


def _planned(group_name: str, hostname: str, ip_address: str) -> Dict[str, Any]:
    return {"group_name": group_name, "hostname": hostname, "ip_address": ip_address}


def _report(diags: Diagnostics) -> None:
    """Print diagnostics and exit non-zero on any error."""
    for diag in diags:
        style = "red" if diag.severity == Severity.ERROR else "yellow"
        where = f" ({diag.attribute})" if diag.attribute else ""
        err_console.print(f"[{style}]{diag.severity.value.capitalize()}{where}:[/] {escape(diag.summary)}")
        if diag.detail:
            err_console.print(f"  {escape(diag.detail)}")
    if diags.has_error():
        sys.exit(1)


def _load_state(path: Optional[str]) -> Optional[Dict[str, Any]]:
    if not path:
        return None
    with open(path) as f:
        try:
            state = json.load(f)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"{path}: invalid JSON: {e}")
    if state is not None and not isinstance(state, dict):
        raise click.BadParameter(f"{path}: expected a JSON object or null")
    return state


def _configured_provider(ctx) -> Provider:
    provider = build_provider()
    _report(provider.configure_provider(ctx.obj["provider_config"]))
    return provider


@click.group()
@click.version_option(version=__version__)
@click.option("--management-server", help="Management server (default: $FWGROUPS_SERVER)")
@click.option("--domain", help="Management domain (default: $FWGROUPS_DOMAIN)")
@click.option(
    "--authentication-key-path",
    type=click.Path(dir_okay=False),
    help="SSH private key (default: $FWGROUPS_AUTH_KEY_PATH)",
)
@click.option("--username", help="SSH username (default: $FWGROUPS_USERNAME or admin)")
@click.option("--port", type=int, help="SSH port (default: $FWGROUPS_PORT or 22)")
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug logging",
)
@click.option(
    "--debug-ssh",
    is_flag=True,
    help="Enable verbose asyncssh logging",
)
@click.pass_context
def cli(
    ctx,
    management_server: Optional[str],
    domain: Optional[str],
    authentication_key_path: Optional[str],
    username: Optional[str],
    port: Optional[int],
    debug: bool,
    debug_ssh: bool,
):
    """fwautomation - manage firewall groups over SSH."""
    ctx.ensure_object(dict)
    raw = {
        "management_server": management_server,
        "domain": domain,
        "authentication_key_path": authentication_key_path,
        "username": username,
        "port": port,
    }
    ctx.obj["provider_config"] = {k: v for k, v in raw.items() if v is not None}

    level = "DEBUG" if debug else "WARNING"
    setup_logging(level=level, debug_ssh=debug_ssh)


@cli.command()
def schema():
    """Print provider and resource schemas as JSON."""
    console.print_json(json.dumps(build_provider().describe()))


@cli.command()
@click.argument("group_name")
@click.argument("hostname")
@click.argument("ip_address")
def validate(group_name: str, hostname: str, ip_address: str):
    """Validate firewall group attributes."""
    resource = build_provider().resources_map[RESOURCE_TYPE]
    _report(resource.validate(_planned(group_name, hostname, ip_address)))
    console.print("[green]Valid[/]")


@cli.command()
@click.argument("group_name")
@click.argument("hostname")
@click.argument("ip_address")
@click.pass_context
def create(ctx, group_name: str, hostname: str, ip_address: str):
    """Add HOSTNAME / IP_ADDRESS to GROUP_NAME."""
    provider = _configured_provider(ctx)
    state, diags = run_async(
        provider.apply(RESOURCE_TYPE, None, _planned(group_name, hostname, ip_address))
    )
    _report(diags)
    console.print(state["id"])


@cli.command()
@click.argument("resource_id")
@click.argument("group_name")
@click.argument("hostname")
@click.argument("ip_address")
@click.pass_context
def read(ctx, resource_id: str, group_name: str, hostname: str, ip_address: str):
    """Confirm GROUP_NAME exists on the management server."""
    provider = _configured_provider(ctx)
    prior = {**_planned(group_name, hostname, ip_address), "id": resource_id}
    state, diags = run_async(provider.read(RESOURCE_TYPE, prior))
    _report(diags)

    table = Table(title=f"Firewall group {group_name}")
    table.add_column("Attribute")
    table.add_column("Value")
    for key, value in state.items():
        table.add_row(key, str(value))
    console.print(table)


@cli.command()
@click.argument("resource_id")
@click.argument("group_name")
@click.argument("hostname")
@click.argument("ip_address")
@click.pass_context
def delete(ctx, resource_id: str, group_name: str, hostname: str, ip_address: str):
    """Remove HOSTNAME / IP_ADDRESS from GROUP_NAME."""
    provider = _configured_provider(ctx)
    prior = {**_planned(group_name, hostname, ip_address), "id": resource_id}
    _, diags = run_async(provider.apply(RESOURCE_TYPE, prior, None))
    _report(diags)
    console.print(f"[green]Removed[/] {resource_id}")


@cli.command()
@click.option("--prior", "prior_path", type=click.Path(exists=True, dir_okay=False),
              help="JSON file with the current state (omit to create)")
@click.option("--planned", "planned_path", type=click.Path(exists=True, dir_okay=False),
              help="JSON file with the desired attributes (omit to destroy)")
@click.pass_context
def apply(ctx, prior_path: Optional[str], planned_path: Optional[str]):
    """Apply a planned firewall group against its prior state.

    Prints the resulting state as JSON (null once destroyed).
    """
    prior = _load_state(prior_path)
    planned = _load_state(planned_path)

    provider = _configured_provider(ctx)
    state, diags = run_async(provider.apply(RESOURCE_TYPE, prior, planned))
    click.echo(json.dumps(state, indent=2))
    _report(diags)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
