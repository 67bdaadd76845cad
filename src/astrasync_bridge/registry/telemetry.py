"""TelemetrySink — best-effort attempt logging to the registry.

Delivery is at-most-once and non-blocking: :meth:`TelemetrySink.log_attempt`
schedules a detached task and returns immediately.  A failed delivery is
logged for operators and dropped; nothing is queued, persisted or retried,
and nothing ever propagates to the request that emitted the event.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from astrasync_bridge.errors import BridgeError

if TYPE_CHECKING:
    from astrasync_bridge.registry.client import RegistryClient

logger = logging.getLogger(__name__)

REGISTRATION_ATTEMPT = "mcp_registration_attempt"
REGISTRATION_FAILED = "mcp_registration_failed"


class TelemetrySink:
    """Fire-and-forget channel for ``/v1/log-attempt`` events."""

    def __init__(
        self,
        client: RegistryClient,
        *,
        source: str = "mcp-bridge",
        enabled: bool = True,
    ) -> None:
        self._client = client
        self._source = source
        self._enabled = enabled
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def pending(self) -> int:
        """Number of events still in flight."""
        return len(self._pending)

    def log_attempt(self, event: str, data: dict[str, Any]) -> None:
        """Schedule delivery of *event*; never raises, never blocks."""
        if not self._enabled:
            return
        payload = {**data, "source": self._source}
        try:
            task = asyncio.get_running_loop().create_task(self._deliver(event, payload))
        except RuntimeError:
            logger.warning("Telemetry event %s dropped: no running event loop", event)
            return
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for in-flight events; used at shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _deliver(self, event: str, payload: dict[str, Any]) -> None:
        try:
            await self._client.log_attempt(event, payload)
        except (BridgeError, RuntimeError) as exc:
            logger.warning("Failed to log attempt %s: %s", event, exc)
        except Exception:
            logger.exception("Unexpected error while logging attempt %s", event)
        else:
            logger.debug("Logged attempt %s", event)
