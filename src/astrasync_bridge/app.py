"""Bridge — wires settings, registry client, telemetry and dispatcher together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from astrasync_bridge.config import BridgeSettings
from astrasync_bridge.dispatcher import RequestDispatcher
from astrasync_bridge.handlers.tools import ToolHandlers
from astrasync_bridge.protocol.catalog import build_catalog
from astrasync_bridge.registry.auth import build_auth_strategy
from astrasync_bridge.registry.client import RegistryClient
from astrasync_bridge.registry.telemetry import TelemetrySink

if TYPE_CHECKING:
    import httpx

    from astrasync_bridge.protocol.catalog import ToolCatalog
    from astrasync_bridge.protocol.models import JsonRpcResponse

logger = logging.getLogger(__name__)


class Bridge:
    """Async context manager owning one bridge instance.

    The catalog is built once from the configured authentication mode and
    shared, read-only, by every request.

    Usage::

        async with Bridge(BridgeSettings.load()) as bridge:
            response = await bridge.handle(message)
    """

    def __init__(
        self,
        settings: BridgeSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or BridgeSettings()
        self.auth = build_auth_strategy(self.settings.auth_mode)
        self.catalog: ToolCatalog = build_catalog(self.auth)
        self.client = RegistryClient(self.settings, transport=transport)
        self.telemetry = TelemetrySink(
            self.client,
            source=self.settings.telemetry_source,
            enabled=self.settings.telemetry_enabled,
        )
        self.dispatcher = RequestDispatcher(
            self.catalog,
            ToolHandlers(self.client, self.auth, self.telemetry),
        )

    async def __aenter__(self) -> Bridge:
        await self.client.__aenter__()
        logger.info(
            "Bridge ready: registry=%s auth=%s tools=%d",
            self.settings.api_url,
            self.settings.auth_mode.value,
            len(self.catalog),
        )
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.telemetry.drain()
        await self.client.__aexit__(*exc)

    async def handle(self, message: Any) -> JsonRpcResponse | None:
        return await self.dispatcher.handle(message)
