"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from astrasync_bridge.protocol.catalog import ToolCatalog  # noqa: TC001
from astrasync_bridge.protocol.models import JsonRpcResponse  # noqa: TC001

console = Console()


def print_tools_table(catalog: ToolCatalog) -> None:
    """Pretty-print the tool catalog as a table."""
    table = Table(title="Available Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Required")
    table.add_column("Description")

    for descriptor in catalog:
        table.add_row(
            descriptor.name,
            ", ".join(descriptor.required) or "-",
            _truncate(descriptor.description),
        )

    console.print(table)


def print_response(response: JsonRpcResponse, *, as_json: bool = False) -> None:
    """Print a tool response: the text blocks, or the error."""
    if as_json:
        console.print_json(json.dumps(response.to_dict(), default=str))
        return

    if response.error is not None:
        console.print(f"[red]Error {response.error.code}:[/red] {response.error.message}")
        if response.error.data is not None:
            console.print(str(response.error.data), markup=False)
        return

    result: dict[str, Any] = response.result or {}
    for block in result.get("content", []):
        if block.get("type") == "text":
            console.print(block.get("text", ""), markup=False, highlight=False, soft_wrap=True)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
