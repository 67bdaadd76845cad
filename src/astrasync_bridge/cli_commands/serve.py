"""``astrasync-bridge serve`` — run the bridge over stdio."""

from __future__ import annotations

import asyncio
import logging

import click

from astrasync_bridge.config import BridgeSettings  # noqa: TC001

logger = logging.getLogger(__name__)


@click.command()
@click.option("--otlp-endpoint", default=None, help="Export traces via OTLP/gRPC (needs the otel extra).")
@click.pass_obj
def serve(settings: BridgeSettings, otlp_endpoint: str | None) -> None:
    """Answer newline-delimited JSON-RPC on stdin/stdout until EOF."""
    from astrasync_bridge.app import Bridge
    from astrasync_bridge.protocol.stdio import serve_stdio

    if otlp_endpoint:
        from astrasync_bridge.utils.tracing import configure_telemetry

        configure_telemetry(otlp_endpoint=otlp_endpoint)

    async def _serve() -> int:
        async with Bridge(settings) as bridge:
            return await serve_stdio(bridge.handle)

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        logger.info("Interrupted")
