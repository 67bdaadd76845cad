"""``astrasync-bridge tools`` — list the catalog and invoke tools directly."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click

from astrasync_bridge.cli_commands._output import console, print_response, print_tools_table
from astrasync_bridge.config import BridgeSettings  # noqa: TC001


@click.group()
def tools() -> None:
    """List and call bridge tools."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print the tools/list payload as JSON.")
@click.pass_obj
def list_tools(settings: BridgeSettings, as_json: bool) -> None:
    """Show the tools advertised by tools/list."""
    from astrasync_bridge.protocol.catalog import build_catalog
    from astrasync_bridge.registry.auth import build_auth_strategy

    catalog = build_catalog(build_auth_strategy(settings.auth_mode))
    if as_json:
        console.print_json(json.dumps({"tools": catalog.to_wire()}))
        return
    print_tools_table(catalog)


@tools.command("call")
@click.argument("name")
@click.option(
    "--arg",
    "-a",
    "raw_args",
    multiple=True,
    metavar="KEY=VALUE",
    help="Tool argument; repeat for several.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the full JSON-RPC response.")
@click.pass_obj
def call_tool(settings: BridgeSettings, name: str, raw_args: tuple[str, ...], as_json: bool) -> None:
    """Invoke tool NAME against the registry and print the result."""
    from astrasync_bridge.app import Bridge

    try:
        arguments = _parse_arguments(raw_args)
    except ValueError as exc:
        console.print(f"[red]Argument error:[/red] {exc}")
        sys.exit(2)

    message = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "tools/call",
        "params": {"name": name, "arguments": arguments},
    }

    async def _call() -> Any:
        async with Bridge(settings) as bridge:
            return await bridge.handle(message)

    response = asyncio.run(_call())
    print_response(response, as_json=as_json)
    if response.error is not None:
        sys.exit(1)


def _parse_arguments(raw_args: tuple[str, ...]) -> dict[str, str]:
    arguments: dict[str, str] = {}
    for item in raw_args:
        key, sep, value = item.partition("=")
        if not sep or not key:
            msg = f"expected KEY=VALUE, got {item!r}"
            raise ValueError(msg)
        arguments[key] = value
    return arguments
