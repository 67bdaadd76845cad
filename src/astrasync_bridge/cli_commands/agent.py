"""``astrasync-bridge agent`` — direct registry lookups."""

from __future__ import annotations

import asyncio
import sys
from typing import TYPE_CHECKING

import click

from astrasync_bridge.cli_commands._output import console
from astrasync_bridge.config import BridgeSettings  # noqa: TC001
from astrasync_bridge.errors import BridgeError

if TYPE_CHECKING:
    from astrasync_bridge.registry.models import AgentDetails


@click.group()
def agent() -> None:
    """Inspect registered agents."""


@agent.command("show")
@click.argument("agent_id")
@click.option("--email", required=True, help="Email of the account that owns the agent.")
@click.pass_obj
def show(settings: BridgeSettings, agent_id: str, email: str) -> None:
    """Show registry details for AGENT_ID."""
    from astrasync_bridge.registry.client import RegistryClient

    async def _lookup() -> AgentDetails | None:
        async with RegistryClient(settings) as client:
            return await client.get_agent_details(agent_id, email)

    try:
        details = asyncio.run(_lookup())
    except BridgeError as exc:
        console.print(f"[red]Lookup error:[/red] {exc}")
        sys.exit(1)

    if details is None:
        console.print(f"[yellow]Agent {agent_id} not found in the registry.[/yellow]")
        return

    console.print_json(details.model_dump_json(by_alias=True))
